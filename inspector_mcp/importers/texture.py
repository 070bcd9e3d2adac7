"""Texture family: texture, erp-texture-cube, render-texture, auto-atlas."""

from __future__ import annotations

from typing import Any

from inspector_mcp.properties.model import PropertyGraph

from .base import choices, enum_prop, find_sub_meta, load_meta, prop, set_user_data
from .texture_utils import apply_texture_properties, generate_mipmaps, texture_properties


def parse_texture_user_data(user_data: dict) -> dict:
    fields = texture_properties(user_data)
    fields["generateMipmaps"] = generate_mipmaps(user_data)
    return fields


def parse_erp_texture_cube_user_data(user_data: dict) -> dict:
    fields = {
        "anisotropy": prop(user_data.get("anisotropy"), "Number", "Anisotropy"),
        "faceSize": prop(user_data.get("faceSize"), "Number", "Face Size"),
    }
    fields.update(texture_properties(user_data))
    fields["generateMipmaps"] = generate_mipmaps(user_data)
    fields["mipBakeMode"] = prop(user_data.get("mipBakeMode"), "Boolean", "Mip Bake Mode")
    return fields


class TextureImporter:
    name = "texture"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump(parse_texture_user_data(meta["userData"]))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value, synthetic=apply_texture_properties)


class ErpTextureCubeImporter:
    name = "erp-texture-cube"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        return PropertyGraph.from_dump(parse_erp_texture_cube_user_data(meta["userData"]))

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        return await set_user_data(self.editor, asset_info, path, value, synthetic=apply_texture_properties)


class RenderTextureImporter:
    name = "render-texture"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        user_data = meta["userData"]
        fields = {
            "width": prop(user_data.get("width"), "Integer", "Width"),
            "height": prop(user_data.get("height"), "Integer", "Height"),
        }
        fields.update(parse_texture_user_data(user_data))

        sprite_frame = find_sub_meta(meta, "sprite-frame")
        if sprite_frame:
            fields["spriteFrame"] = prop({"uuid": sprite_frame.get("uuid")}, "cc.SpriteFrame", "Sprite Frame",
                                         readonly=True)
        return PropertyGraph.from_dump(fields)

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        if path.split(".")[0] == "spriteFrame":
            return False
        return await set_user_data(self.editor, asset_info, path, value, synthetic=apply_texture_properties)


class AutoAtlasImporter:
    name = "auto-atlas"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        meta = await load_meta(self.editor, asset_info)
        user_data = meta["userData"]
        fields = {
            "maxWidth": prop(user_data.get("maxWidth"), "Integer", "Max Width"),
            "maxHeight": prop(user_data.get("maxHeight"), "Integer", "Max Height"),
            "padding": prop(user_data.get("padding"), "Integer", "Padding"),
            "allowRotation": prop(bool(user_data.get("allowRotation")), "Boolean", "Allow Rotation"),
            "forceSquared": prop(bool(user_data.get("forceSquared")), "Boolean", "Force Squared"),
            "powerOfTwo": prop(bool(user_data.get("powerOfTwo")), "Boolean", "Power of Two"),
            "algorithm": enum_prop(user_data.get("algorithm"), choices("MaxRects", "Basic"), "Algorithm"),
            "format": enum_prop(user_data.get("format"), choices("png", "jpg", "webp"), "Format"),
            "quality": prop(user_data.get("quality"), "Number", "Quality", visible=user_data.get("format") == "jpg"),
            "contourBleed": prop(bool(user_data.get("contourBleed")), "Boolean", "Contour Bleed"),
            "paddingBleed": prop(bool(user_data.get("paddingBleed")), "Boolean", "Padding Bleed"),
            "filterUnused": prop(bool(user_data.get("filterUnused")), "Boolean", "Filter Unused Resources"),
        }
        if user_data.get("textureSetting"):
            fields.update(parse_texture_user_data(user_data["textureSetting"]))
        return PropertyGraph.from_dump(fields)

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        def synthetic(user_data: dict, path: str, value: Any) -> bool:
            # texture settings are shown flat but stored under textureSetting
            texture_setting = user_data.get("textureSetting")
            if not isinstance(texture_setting, dict):
                return False
            if apply_texture_properties(texture_setting, path, value):
                return True
            if path in texture_setting:
                texture_setting[path] = value
                return True
            return False

        return await set_user_data(self.editor, asset_info, path, value, synthetic=synthetic)
