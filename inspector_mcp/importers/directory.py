"""directory assets: asset bundle settings."""

from __future__ import annotations

from typing import Any

from inspector_mcp.properties.model import PropertyGraph

from .base import enum_prop, load_meta, prop, set_user_data

COMPRESSION_TYPES = [
    {"name": "None", "value": "none"},
    {"name": "Merge Depend", "value": "merge_dep"},
    {"name": "Zip", "value": "zip"},
    {"name": "Zip High Compression", "value": "zip_high"},
    {"name": "Zip Store", "value": "zip_store"},
]


def parse_directory_user_data(user_data: dict) -> dict:
    fields = {"isBundle": prop(bool(user_data.get("isBundle")), "Boolean", "Is Bundle")}
    if not user_data.get("isBundle"):
        return fields

    fields["bundleName"] = prop(user_data.get("bundleName"), "String", "Bundle Name")
    fields["priority"] = prop(user_data.get("priority"), "Integer", "Priority")
    if "compressionType" in user_data:
        fields["compressionType"] = enum_prop(user_data["compressionType"], COMPRESSION_TYPES, "Compression Type")
    if "target" in user_data:
        fields["target"] = prop(user_data["target"], "String", "Target Platform")
    return fields


class DirectoryImporter:
    name = "directory"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        # plain folders carry no userData until they become bundles
        meta = await load_meta(self.editor, asset_info, require_user_data=False)
        return PropertyGraph.from_dump(parse_directory_user_data(meta.get("userData") or {}))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value, create_missing=True)
