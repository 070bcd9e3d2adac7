"""Project settings, exposed as a pseudo-asset over the `project` config.

Layer lists are shown as arrays of structs. Writing one index past the end
of sorting layers, custom layers or collision groups appends a new entry;
the ids and group indices the engine expects are allocated here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from inspector_mcp.properties.model import OBJECT_REFERENCE, VALUE_TYPE, PropertyGraph
from inspector_mcp.properties.normalizer import reference_uuid

from .base import prop

logger = logging.getLogger("inspector-mcp.importers.project_settings")

MAX_COLLISION_GROUP = 31
DEFAULT_DESIGN_RESOLUTION = {"width": 1280, "height": 720}

SORTING_LAYER_ITEM = "SortingLayerItem"
LAYER_ITEM = "LayerItem"
COLLISION_GROUP_ITEM = "CollisionGroupItem"

_PHYSICS_SCALARS = (
    ("allowSleep", "Boolean", {}),
    ("autoSimulation", "Boolean", {}),
    ("sleepThreshold", "Float", {}),
    ("fixedTimeStep", "Float", {"min": 0}),
    ("maxSubSteps", "Integer", {"min": 1}),
)


def _sorting_layer(layer: Mapping) -> dict:
    return prop({
        "id": prop(layer.get("id"), "Integer", readonly=True),
        "name": prop(layer.get("name"), "String"),
        "value": prop(layer.get("value"), "Integer"),
    }, SORTING_LAYER_ITEM, extends=[])


def _custom_layer(layer: Mapping) -> dict:
    return prop({
        "name": prop(layer.get("name"), "String"),
        "value": prop(layer.get("value"), "Integer", readonly=True),
    }, LAYER_ITEM, extends=[])


def _collision_group(group: Mapping) -> dict:
    return prop({
        "index": prop(group.get("index"), "Integer", readonly=True),
        "name": prop(group.get("name"), "String"),
    }, COLLISION_GROUP_ITEM)


def _collision_bitmask(groups: list) -> list[dict]:
    default = next((g for g in groups if g.get("index") == 0), None)
    bitmask = [{"name": default.get("name") if default else "DEFAULT", "value": 1}]
    bitmask.extend({"name": g.get("name"), "value": 1 << g["index"]} for g in groups if g.get("index") != 0)
    return bitmask


def build_physics(physics: Mapping) -> dict:
    fields = {}
    for key, type_, schema in _PHYSICS_SCALARS:
        if key in physics:
            fields[key] = prop(physics[key], type_, **schema)
    if physics.get("gravity"):
        fields["gravity"] = prop(physics["gravity"], "cc.Vec3", extends=[VALUE_TYPE])

    default_material = physics.get("defaultMaterial")
    fields["defaultMaterial"] = prop({"uuid": default_material} if default_material else None,
                                     "cc.PhysicsMaterial", extends=[OBJECT_REFERENCE])

    groups = physics.get("collisionGroups") or []
    fields["collisionGroups"] = prop(
        [_collision_group(g) for g in groups], COLLISION_GROUP_ITEM, isArray=True,
        elementTypeData=_collision_group({"index": 0, "name": ""}),
    )

    bitmask = _collision_bitmask(groups)
    matrix = physics.get("collisionMatrix") or {}
    max_index = max([0, *(g.get("index", 0) for g in groups), *(int(k) for k in matrix if str(k).isdigit())])
    rows = [matrix.get(str(i), matrix.get(i, 0)) or 0 for i in range(max_index + 1)]
    fields["collisionMatrix"] = prop(
        [prop(row, "BitMask", bitmaskList=bitmask) for row in rows], "BitMask", isArray=True,
        elementTypeData=prop(0, "BitMask", bitmaskList=bitmask),
    )
    return fields


def build_general(general: Mapping) -> dict:
    resolution = general.get("designResolution") or {}
    return {
        "designResolution": prop({
            "width": resolution.get("width", DEFAULT_DESIGN_RESOLUTION["width"]),
            "height": resolution.get("height", DEFAULT_DESIGN_RESOLUTION["height"]),
        }, "cc.Size", extends=[VALUE_TYPE]),
        "fitWidth": prop(resolution.get("fitWidth", False), "Boolean"),
        "fitHeight": prop(resolution.get("fitHeight", False), "Boolean"),
        "downloadMaxConcurrency": prop(general.get("downloadMaxConcurrency", 15), "Integer", min=1),
        "highQuality": prop(general.get("highQuality", False), "Boolean"),
    }


def build_project_settings(config: Mapping) -> dict:
    sorting = config.get("sorting-layer") or {}
    return {
        "sortingLayers": prop(
            [_sorting_layer(layer) for layer in sorting.get("layers") or []], SORTING_LAYER_ITEM,
            extends=[], isArray=True, tooltip="Sorting layers for sprites",
            elementTypeData=_sorting_layer({"id": 0, "name": "", "value": 0}),
        ),
        "customLayers": prop(
            [_custom_layer(layer) for layer in config.get("layer") or []], LAYER_ITEM,
            extends=[], isArray=True, tooltip="User defined rendering layers",
            elementTypeData=_custom_layer({"name": "", "value": 0}),
        ),
        "physics": prop(build_physics(config.get("physics") or {}), "PhysicsSettings"),
        "general": prop(build_general(config.get("general") or {}), "GeneralSettings"),
    }


def _list_index(parts: list[str], position: int) -> int:
    if len(parts) <= position or not parts[position].isdigit():
        return -1
    return int(parts[position])


def _layer_name(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return value.get("name") or ""
    return ""


def next_collision_group(groups: list) -> int:
    """Lowest free group index above the default group 0."""
    used = {g.get("index") for g in groups} | {0}
    index = 1
    while index in used:
        index += 1
    return index


class ProjectSettingsImporter:
    name = "project-settings"

    def __init__(self, editor):
        self.editor = editor

    async def _config(self) -> dict:
        return await self.editor.query_project_config() or {}

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        return PropertyGraph.from_dump(build_project_settings(await self._config()))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        head = path.split(".")[0]
        if head == "customLayers":
            return await self._set_custom_layer(path, value)
        if head == "sortingLayers":
            return await self._set_sorting_layer(path, value)
        if path.startswith("physics.collisionGroups"):
            return await self._set_collision_group(path, value)
        if head == "general":
            return await self._set_general(path, value)

        if path == "physics.defaultMaterial":
            ref = reference_uuid(value)
            value = ref["uuid"] if ref else None

        await self.editor.set_project_config(path, value)
        return True

    async def _set_custom_layer(self, path: str, value: Any) -> bool:
        index = _list_index(path.split("."), 1)
        if index < 0:
            return False
        await self.editor.set_project_config(f"layer.{index}", {"name": _layer_name(value), "value": 1 << (index + 1)})
        return True

    async def _set_sorting_layer(self, path: str, value: Any) -> bool:
        parts = path.split(".")
        index = _list_index(parts, 1)
        if index < 0 or len(parts) > 3:
            return False

        if len(parts) == 3:
            patch = {parts[2]: value}
        elif isinstance(value, str):
            patch = {"name": value}
        elif isinstance(value, Mapping):
            patch = dict(value)
        else:
            return False

        config = await self._config()
        sorting = config.get("sorting-layer") or {"layers": [], "increaseId": 0}
        layers = sorting.setdefault("layers", [])

        if index < len(layers):
            layers[index] = {**layers[index], **patch}
        elif index == len(layers):
            new_id = (sorting.get("increaseId") or 0) + 1
            sorting["increaseId"] = new_id
            layer_value = patch.get("value")
            if layer_value is None:
                layer_value = max((layer.get("value", -1) for layer in layers), default=-1) + 1
            layers.append({"id": new_id, "name": patch.get("name") or f"Layer {new_id}", "value": layer_value})
        else:
            return False

        await self.editor.set_project_config("sorting-layer", sorting)
        return True

    async def _set_collision_group(self, path: str, value: Any) -> bool:
        index = _list_index(path.split("."), 2)
        if index < 0:
            return False

        config = await self._config()
        physics = config.get("physics") or {}
        groups = physics.setdefault("collisionGroups", [])
        name = _layer_name(value)

        if index < len(groups):
            if name:
                groups[index]["name"] = name
        elif index == len(groups):
            group_index = next_collision_group(groups)
            if group_index > MAX_COLLISION_GROUP:
                logger.warning("All %d collision groups are in use", MAX_COLLISION_GROUP + 1)
                return False
            groups.append({"index": group_index, "name": name or f"Group {group_index}"})
        else:
            return False

        await self.editor.set_project_config("physics", physics)
        return True

    async def _set_general(self, path: str, value: Any) -> bool:
        parts = path.split(".")
        if len(parts) < 2:
            return False
        key = parts[1]

        config = await self._config()
        general = config.get("general") or {}
        resolution = general.setdefault("designResolution", dict(DEFAULT_DESIGN_RESOLUTION))

        if key == "designResolution":
            if len(parts) == 3:
                resolution[parts[2]] = value
            elif isinstance(value, Mapping):
                resolution.update({k: value[k] for k in ("width", "height") if k in value})
            else:
                return False
        elif key in ("fitWidth", "fitHeight"):
            resolution[key] = value
        else:
            general[key] = value

        await self.editor.set_project_config("general", general)
        return True
