"""material assets, read and written through the scene's material dump.

The graph exposes the effect (as an enum over every visible effect), the
technique index and, for the current technique, one struct per pass holding
its defines, uniforms and render states.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from inspector_mcp.properties.errors import NotFound
from inspector_mcp.properties.model import VALUE_TYPE, PropertyGraph

from .base import choices, prop, set_wrapped

logger = logging.getLogger("inspector-mcp.importers.material")

DEFAULT_EFFECT = "builtin-standard"
EFFECT_ENUM_NAME = "MaterialEffectAssetName"
CHANGE_BROADCAST = "material-inspector:change-dump"

VALUE_TYPES = ("Vec2", "Vec3", "Vec4", "Color", "Rect", "Size", "Quat", "Mat3", "Mat4")

_DIGITS = re.compile(r"(\d+)")


def _natural_key(name: str) -> list:
    return [int(chunk) if chunk.isdigit() else chunk.lower() for chunk in _DIGITS.split(name)]


def _effects(all_effects: Any) -> list[dict]:
    if isinstance(all_effects, Mapping):
        return list(all_effects.values())
    return list(all_effects or [])


def defines_satisfied(requirements: list, define_map: Mapping) -> bool:
    """True when every `NAME` is set and every `!NAME` is unset."""
    for requirement in requirements:
        if requirement.startswith("!"):
            if define_map.get(requirement[1:]):
                return False
        elif not define_map.get(requirement):
            return False
    return True


def _define_property(define: dict, define_map: Mapping) -> dict:
    kind = define.get("type")
    enum_list = None
    if kind == "Number":
        bounds = define.get("range") or []
        low, high = (bounds[0], bounds[1]) if len(bounds) >= 2 else (0, -1)
        enum_list = [{"name": f"Variant{i}", "value": i} for i in range(low, high + 1)]
        kind = "Enum"
    elif kind == "String":
        enum_list = choices(*(define.get("options") or []))
        kind = "Enum"
    elif kind == "Enum":
        enum_list = define.get("enumList")
    else:
        kind = "Boolean"

    dump = prop(define.get("value"), kind, extends=[], tooltip=define.get("tooltip"),
                visible=defines_satisfied(define.get("defines") or [], define_map))
    if enum_list is not None:
        dump["enumList"] = enum_list
    return dump


def _uniform_property(uniform: dict, define_map: Mapping) -> dict:
    extends = list(uniform.get("extends") or [])
    # keeps value structs from being expanded into classes of their own
    if uniform.get("type") in VALUE_TYPES and VALUE_TYPE not in extends:
        extends.append(VALUE_TYPE)
    return {
        **uniform,
        "displayName": uniform.get("displayName") or uniform.get("name"),
        "visible": defines_satisfied(uniform.get("defines") or [], define_map),
        "extends": extends,
    }


def pass_property(pass_dump: dict, pass_index: int) -> dict:
    define_map = {define["name"]: define.get("value") for define in pass_dump.get("defines") or []}
    fields = {}
    for define in pass_dump.get("defines") or []:
        fields[define["name"]] = _define_property(define, define_map)
    for uniform in pass_dump.get("props") or []:
        fields[uniform["name"]] = _uniform_property(uniform, define_map)

    suffix = pass_index if fields else ""
    fields["phase"] = prop(pass_dump.get("phase") or "", "String", extends=[], visible=True, readonly=True)
    return prop(fields, f"cc.MaterialPass{suffix}", extends=["cc.MaterialPass"])


def _is_texture_type(type_name: Any) -> bool:
    lowered = str(type_name or "").lower()
    return "texture" in lowered or "sampler" in lowered


class MaterialImporter:
    name = "material"

    def __init__(self, editor):
        self.editor = editor

    async def _material_dump(self, asset_info: dict) -> dict:
        dump = await self.editor.query_material(asset_info.get("uuid"))
        if not dump:
            raise NotFound(f"Material dump not found for {asset_info.get('uuid')}", instance=asset_info.get("uuid"))
        return dump

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        material = await self._material_dump(asset_info)
        effects = sorted(
            (effect for effect in _effects(await self.editor.query_all_effects()) if not effect.get("hideInEditor")),
            key=lambda effect: _natural_key(effect.get("name", "")),
        )

        fields = {
            "effect": prop(
                material.get("effect") or DEFAULT_EFFECT, "Enum",
                userData={"enumName": EFFECT_ENUM_NAME},
                enumList=[{"name": e["name"].replace("../", ""), "value": e["name"]} for e in effects],
                visible=True, readonly=False,
            ),
        }

        techniques = material.get("data")
        if techniques:
            fields["technique"] = prop(
                material.get("technique"), "Enum",
                enumList=[{"name": t.get("name") or str(i), "value": i} for i, t in enumerate(techniques)],
                visible=True, readonly=False,
            )
            technique_index = material.get("technique") or 0
            current = techniques[technique_index] if technique_index < len(techniques) else None
            if current and current.get("passes"):
                fields["passes"] = prop(
                    [pass_property(pass_dump, i) for i, pass_dump in enumerate(current["passes"])],
                    "cc.MaterialPasses", isArray=True, visible=True,
                )

        return PropertyGraph.from_dump(fields)

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        material = await self._material_dump(asset_info)

        if path in ("effect", "effectAsset"):
            material["effect"] = await self._effect_name(value)
        elif path == "technique":
            material["technique"] = value
        elif not self._set_pass_value(material, path, value):
            return False

        await self.editor.apply_material(asset_info.get("uuid"), material)
        await self.editor.broadcast(CHANGE_BROADCAST)
        return True

    async def _effect_name(self, value: Any) -> str:
        if isinstance(value, Mapping):
            value = value.get("name") or value.get("uuid")
        all_effects = await self.editor.query_all_effects()
        if isinstance(all_effects, Mapping) and value in all_effects:
            return all_effects[value]["name"]
        for effect in _effects(all_effects):
            name = effect.get("name", "")
            if value in (name, name.replace("../", "")):
                return name
        raise NotFound(f"Effect '{value}' not found")

    def _set_pass_value(self, material: dict, path: str, value: Any) -> bool:
        """Write `passes.<i>.<name>[.<sub>...]` into the current technique."""
        parts = path.split(".")
        if len(parts) < 3 or parts[0] != "passes" or not parts[1].isdigit():
            return False

        techniques = material.get("data") or []
        technique_index = material.get("technique") or 0
        if technique_index >= len(techniques):
            return False
        passes = techniques[technique_index].get("passes") or []
        pass_index = int(parts[1])
        if pass_index >= len(passes):
            return False

        pass_dump = passes[pass_index]
        name, sub_path = parts[2], ".".join(parts[3:])
        handled = False

        for uniform in pass_dump.get("props") or []:
            if uniform.get("name") != name:
                continue
            if not sub_path:
                if isinstance(value, str) and _is_texture_type(uniform.get("type")):
                    value = {"uuid": value}
                uniform["value"] = value
                handled = True
            elif isinstance(uniform.get("value"), (dict, list)):
                handled = set_wrapped(uniform, sub_path, value) or handled

        for define in pass_dump.get("defines") or []:
            if define.get("name") == name and not sub_path:
                define["value"] = value
                handled = True

        states = (pass_dump.get("states") or {}).get("value") or {}
        state = states.get(name)
        if isinstance(state, dict):
            if not sub_path:
                state["value"] = value
                handled = True
            elif isinstance(state.get("value"), (dict, list)):
                handled = set_wrapped(state, sub_path, value) or handled

        if not handled:
            logger.debug("Pass %d has no prop, define or state '%s'", pass_index, name)
        return handled
