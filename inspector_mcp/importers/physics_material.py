"""physics-material assets, edited through the scene process."""

from __future__ import annotations

from typing import Any

from inspector_mcp.properties.errors import NotFound
from inspector_mcp.properties.model import PropertyGraph

from .base import set_wrapped


class PhysicsMaterialImporter:
    name = "physics-material"

    def __init__(self, editor):
        self.editor = editor

    async def _material_meta(self, asset_info: dict) -> dict:
        meta = await self.editor.query_physics_material(asset_info.get("uuid"))
        if not meta:
            raise NotFound(f"Physics material meta not found for {asset_info.get('uuid')}",
                           instance=asset_info.get("uuid"))
        return meta

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        return PropertyGraph.from_dump(await self._material_meta(asset_info))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        meta = await self._material_meta(asset_info)
        if not set_wrapped(meta, path, value):
            return False
        # the scene recomputes derived fields before the change is applied
        meta = await self.editor.change_physics_material(meta)
        await self.editor.apply_physics_material(asset_info.get("uuid"), meta)
        return True
