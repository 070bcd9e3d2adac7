"""Model assets (fbx, gltf): mesh import options and LOD settings."""

from __future__ import annotations

from typing import Any, Optional

from inspector_mcp.properties.model import PropertyGraph

from .base import load_meta, prop, set_user_data

INCLUDE_MODE_ENUM = "cc.ModelDataIncludeMode"
INCLUDE_MODES = [
    {"name": "Optional", "value": 0},
    {"name": "Exclude", "value": 1},
    {"name": "Require", "value": 2},
    {"name": "Recalculate", "value": 3},
]

ANIMATION_BAKE_RATES = [
    {"name": "Auto", "value": 0},
    {"name": "BakeRate24", "value": 24},
    {"name": "BakeRate25", "value": 25},
    {"name": "BakeRate30", "value": 30},
    {"name": "BakeRate60", "value": 60},
]

_FLAGS = (
    ("skipValidation", "Skip Validation"),
    ("disableMeshSplit", "Disable Mesh Split"),
    ("allowMeshDataAccess", "Allow Data Access"),
    ("addVertexColor", "Add Vertex Color"),
    ("promoteSingleRootNode", "Promote Single Root Node"),
)

# fields shown at the top level but stored under userData.fbx
FBX_FIELDS = ("animationBakeRate", "preferLocalTimeSpan", "smartMaterialEnabled")


def _include_mode(value: Any, tooltip: Optional[str] = None) -> dict:
    dump = prop(value, "Enum", userData={"enumName": INCLUDE_MODE_ENUM}, enumList=INCLUDE_MODES)
    if tooltip:
        dump["tooltip"] = tooltip
    return dump


def _flag(data: dict, key: str, tooltip: Optional[str] = None, **schema: Any) -> dict:
    dump = prop(bool(data.get(key)), "Boolean", **schema)
    if tooltip:
        dump["tooltip"] = tooltip
    return dump


def _mesh_optimize(data: Optional[dict]) -> dict:
    data = data or {}
    return prop({
        "enable": _flag(data, "enable", "It is recommended to enable these options for models with high vertex count."),
        "vertexCache": _flag(data, "vertexCache"),
        "vertexFetch": _flag(data, "vertexFetch"),
        "overdraw": _flag(data, "overdraw"),
    }, "cc.MeshOptimizeOptions", "Mesh Optimize")


def _mesh_simplify(data: Optional[dict]) -> dict:
    data = data or {"targetRatio": 1, "errorRate": 1}
    ratio = {"min": 0, "max": 1, "step": 0.01}
    return prop({
        "enable": _flag(data, "enable"),
        "targetRatio": prop(data.get("targetRatio"), "Float", tooltip=(
            "The target ratio of the simplified mesh data. It is recommended to set this value to 0.5."
        ), **ratio),
        "autoErrorRate": _flag(data, "autoErrorRate"),
        "errorRate": prop(data.get("errorRate"), "Float", visible=not data.get("autoErrorRate"), tooltip=(
            "The max error rate of the simplified mesh data. This value also alters the result size. "
            "It is recommended to tune until you get a good result."
        ), **ratio),
        "lockBoundary": _flag(data, "lockBoundary"),
    }, "cc.MeshSimplifyOptions", "Mesh Simplify")


def _mesh_cluster(data: Optional[dict]) -> dict:
    data = data or {}
    return prop({
        "enable": _flag(data, "enable"),
        "generateBounding": _flag(data, "generateBounding", (
            "Whether to generate bounding sphere and normal cone for the clustered mesh data."
        )),
    }, "cc.MeshClusterOptions", "Mesh Cluster")


def _mesh_compress(data: Optional[dict]) -> dict:
    data = data or {}
    return prop({key: _flag(data, key) for key in ("enable", "encode", "compress", "quantize")},
                "cc.MeshCompressOptions", "Mesh Compress")


def _lods(data: Optional[dict]) -> dict:
    data = data or {}
    fields = {"enable": _flag(data, "enable", display_name="Enable")}
    for index, option in enumerate(data.get("options") or []):
        fields[f"lod{index}"] = prop({
            "screenRatio": prop(option.get("screenRatio"), "Number", "Screen Ratio"),
            "faceCount": prop(option.get("faceCount"), "Number", "Face Count", readonly=True),
        }, "cc.LodOptions")
    return prop(fields, "cc.LodGroups", "LODs")


def parse_model_user_data(user_data: dict) -> dict:
    fields = {
        "normals": _include_mode(user_data.get("normals")),
        "tangents": _include_mode(user_data.get("tangents")),
        "morphNormals": _include_mode(user_data.get("morphNormals"),
                                      "Required if you need to use normal map on morph targets"),
    }
    for key, display_name in _FLAGS:
        fields[key] = _flag(user_data, key, display_name=display_name)
    fields["meshOptimize"] = _mesh_optimize(user_data.get("meshOptimize"))
    fields["meshSimplify"] = _mesh_simplify(user_data.get("meshSimplify"))
    fields["meshCluster"] = _mesh_cluster(user_data.get("meshCluster"))
    fields["meshCompress"] = _mesh_compress(user_data.get("meshCompress"))
    fields["lods"] = _lods(user_data.get("lods"))
    return fields


def parse_fbx_user_data(user_data: dict) -> dict:
    fbx = user_data.get("fbx") or {}
    fields = parse_model_user_data(user_data)
    fields["animationBakeRate"] = prop(
        fbx.get("animationBakeRate"), "Enum", enumList=ANIMATION_BAKE_RATES,
        tooltip="Specify the animation bake sample rate in frames per second (fps).",
    )
    fields["preferLocalTimeSpan"] = _flag(fbx, "preferLocalTimeSpan", (
        "When exporting FBX animations, whether prefer to use the time range recorded in FBX file.<br>"
        "If one is not preferred, or one is invalid for use, the time range is robustly calculated.<br>"
        "Some FBX generators may not export this information."
    ))
    fields["smartMaterialEnabled"] = _flag(fbx, "smartMaterialEnabled", (
        "Convert DCC materials to engine builtin materials which match the internal lighting model."
    ))
    fields["legacyFbxImporter"] = _flag(user_data, "legacyFbxImporter")
    return fields


def apply_model_properties(user_data: dict, path: str, value: Any) -> bool:
    """Map synthetic `lods.lod<i>.<field>` onto `lods.options.<i>.<field>`."""
    parts = path.split(".")
    if len(parts) != 3 or parts[0] != "lods" or not parts[1].startswith("lod") or not parts[1][3:].isdigit():
        return False
    options = (user_data.get("lods") or {}).get("options") or []
    index = int(parts[1][3:])
    if index >= len(options):
        return False
    options[index][parts[2]] = value
    return True


def apply_fbx_properties(user_data: dict, path: str, value: Any) -> bool:
    if path in FBX_FIELDS:
        user_data.setdefault("fbx", {})[path] = value
        return True
    return apply_model_properties(user_data, path, value)


class GltfImporter:
    name = "gltf"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump(parse_model_user_data(meta["userData"]))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value, synthetic=apply_model_properties)


class FbxImporter:
    name = "fbx"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump(parse_fbx_user_data(meta["userData"]))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value, synthetic=apply_fbx_properties)
