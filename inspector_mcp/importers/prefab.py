"""prefab assets."""

from __future__ import annotations

from typing import Any

from inspector_mcp.properties.model import PropertyGraph

from .base import load_meta, prop, set_user_data


class PrefabImporter:
    name = "prefab"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump({
            "persistent": prop(bool(meta["userData"].get("persistent")), "Boolean", "Persistent"),
        })

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value)
