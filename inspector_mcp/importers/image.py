"""image assets: top-level import flags plus views of their sub-assets.

An image produces texture / sprite-frame / erp-texture-cube sub-assets
depending on its `type`. Their settings are shown nested under `texture`,
`spriteFrame` and `textureCube` and written back into the matching
sub-meta.
"""

from __future__ import annotations

import logging
from typing import Any

from inspector_mcp.properties.model import PropertyGraph

from .base import enum_prop, find_sub_meta, load_meta, prop, save_meta, set_nested
from .sprite_frame import parse_sprite_frame_user_data
from .texture import parse_erp_texture_cube_user_data, parse_texture_user_data
from .texture_utils import apply_texture_properties

logger = logging.getLogger("inspector-mcp.importers.image")

IMAGE_TYPES = [
    {"name": "raw", "value": "raw"},
    {"name": "texture", "value": "texture"},
    {"name": "normal-map", "value": "normal map"},
    {"name": "sprite-frame", "value": "sprite-frame"},
    {"name": "texture-cube", "value": "texture cube"},
]

TOP_LEVEL_FIELDS = ("type", "flipVertical", "fixAlphaTransparencyArtifacts", "flipGreenChannel", "isRGBE")

# graph prefix -> sub-meta importer
SUB_ASSET_PREFIXES = {
    "texture": "texture",
    "spriteFrame": "sprite-frame",
    "textureCube": "erp-texture-cube",
}

SUB_ASSET_STRUCT = "cc.Object"


class ImageImporter:
    name = "image"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info, require_user_data=False)
        user_data = meta.get("userData") or {}
        image_type = user_data.get("type") or "texture"

        fields = {
            "type": enum_prop(image_type, IMAGE_TYPES, "Type", visible=True),
            "flipVertical": prop(bool(user_data.get("flipVertical")), "Boolean", "Flip Vertical"),
            "fixAlphaTransparencyArtifacts": prop(
                bool(user_data.get("fixAlphaTransparencyArtifacts")), "Boolean",
                "Fix Alpha Transparency Artifacts", visible=image_type != "normal map",
            ),
            "flipGreenChannel": prop(bool(user_data.get("flipGreenChannel")), "Boolean", "Flip Green Channel"),
            "isRGBE": prop(bool(user_data.get("isRGBE")), "Boolean", "Is RGBE", visible=image_type == "texture cube"),
        }

        def sub_user_data(importer: str) -> dict:
            return (find_sub_meta(meta, importer) or {}).get("userData") or {}

        if image_type in ("texture", "normal map", "sprite-frame"):
            fields["texture"] = prop(parse_texture_user_data(sub_user_data("texture")),
                                     SUB_ASSET_STRUCT, "Texture Properties")
            if image_type == "sprite-frame":
                fields["spriteFrame"] = prop(parse_sprite_frame_user_data(sub_user_data("sprite-frame")),
                                             SUB_ASSET_STRUCT, "Sprite Frame Properties")
        elif image_type == "texture cube":
            fields["textureCube"] = prop(parse_erp_texture_cube_user_data(sub_user_data("erp-texture-cube")),
                                         SUB_ASSET_STRUCT, "Texture Cube Properties")

        return PropertyGraph.from_dump(fields)

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        meta = await load_meta(self.editor, asset_info, require_user_data=False)

        if path in TOP_LEVEL_FIELDS:
            meta.setdefault("userData", {})[path] = value
        else:
            prefix, _, sub_path = path.partition(".")
            target = SUB_ASSET_PREFIXES.get(prefix)
            sub_meta = find_sub_meta(meta, target) if target and sub_path else None
            if sub_meta is None:
                logger.debug("No sub-asset for '%s' on image %s", path, asset_info.get("uuid"))
                return False
            sub_data = sub_meta.setdefault("userData", {})
            handled = target in ("texture", "erp-texture-cube") and apply_texture_properties(sub_data, sub_path, value)
            if not handled and not set_nested(sub_data, sub_path, value):
                return False

        await save_meta(self.editor, asset_info, meta)
        return True
