"""sprite-frame asset settings (trim, borders, pivot)."""

from __future__ import annotations

from typing import Any

from inspector_mcp.properties.model import PropertyGraph

from .base import choices, enum_prop, load_meta, prop, set_user_data

# (field, display name, readonly)
_NUMERIC_FIELDS = (
    ("offsetX", "Offset X", True),
    ("offsetY", "Offset Y", True),
    ("trimThreshold", "Trim Threshold", False),
    ("trimX", "Trim X", False),
    ("trimY", "Trim Y", False),
    ("width", "Width", False),
    ("height", "Height", False),
    ("borderTop", "Border Top", False),
    ("borderBottom", "Border Bottom", False),
    ("borderLeft", "Border Left", False),
    ("borderRight", "Border Right", False),
    ("pixelsToUnit", "Pixels To Unit", False),
    ("pivotX", "Pivot X", False),
    ("pivotY", "Pivot Y", False),
)


def parse_sprite_frame_user_data(user_data: dict) -> dict:
    fields = {
        "packable": prop(user_data.get("packable"), "Boolean", "Packable"),
        "rotated": prop(user_data.get("rotated"), "Boolean", "Rotated", readonly=True),
        "trimType": enum_prop(user_data.get("trimType"), choices("auto", "custom", "none"), "Trim Type"),
    }
    for key, display_name, readonly in _NUMERIC_FIELDS:
        fields[key] = prop(user_data.get(key), "Number", display_name, readonly=readonly)
    return fields


class SpriteFrameImporter:
    name = "sprite-frame"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump(parse_sprite_frame_user_data(meta["userData"]))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value)
