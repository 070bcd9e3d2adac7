"""Synthesize TypeScript-flavoured class/enum definitions from a PropertyGraph.

The output is read by agents before they write: it tells them which paths
exist, which values an enum accepts, and which fields hold references.
Blocks are deduplicated by name within one synthesis call; enums come first,
then classes, both in the order they were discovered.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from .model import MISSING, OBJECT_REFERENCE, VALUE_TYPE, PropertyNode, Raw, Wrapped

logger = logging.getLogger("inspector-mcp.properties.typedef")

COMMON_TYPES_DEFINITION = "\n".join([
    "interface IExposedAttributes { type?: string, visible?: boolean, multiline?: boolean, min?: number, "
    "max?: number, step?: number, unit?: string, radian?: boolean }",
    "function property(options: IExposedAttributes) {}",
    "type InstanceReference<T> = { id: string; type: string };",
    "class Vec2 { x: number; y: number; }",
    "class Vec3 { x: number; y: number; z: number; }",
    "class Vec4 { x: number; y: number; z: number; w: number; }",
    "class Color { r: number; g: number; b: number; a: number; }",
    "class Rect { x: number; y: number; width: number; height: number; }",
    "class Size { width: number; height: number; }",
    "class Quat { x: number; y: number; z: number; w: number; }",
    "class Mat3 { m00: number; m01: number; m02: number;",
    "\tm03: number; m04: number; m05: number;",
    "\tm06: number; m07: number; m08: number; }",
    "class Mat4 { m00: number; m01: number; m02: number; m03: number;",
    "\tm04: number; m05: number; m06: number; m07: number;",
    "\tm08: number; m09: number; m10: number; m11: number;",
    "\tm12: number; m13: number; m14: number; m15: number; }",
    "class Gradient { alphaKeys: Array<{ alpha: number, time: number }>, colorKeys: Array<{ "
    "/* always 3 elements: r, g and b values */color: Array<number>, time: number }>, mode: number }",
])

PRIMITIVE_TYPES = ("Integer", "Float", "Number", "String", "Boolean")
ENUM_KINDS = ("Enum", "BitMask")
_SCALARS = {
    "Integer": "number",
    "Float": "number",
    "Number": "number",
    "Enum": "number",
    "BitMask": "number",
    "String": "string",
    "Boolean": "boolean",
}
_DECORATOR_TYPES = {"Integer": "CCInteger", "Float": "CCFloat", "Number": "CCFloat"}
_NUMERIC_HINTS = ("min", "max", "step", "unit", "radian")
# Untyped names the engine treats as object references
_REFERENCE_TYPES = ("Node", "Component", "cc.Node", "cc.Component")

_NON_WORD = re.compile(r"[^a-zA-Z0-9_]")
_HTML_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)
_I18N_PREFIX = "i18n:"


def synthesize(graph: Mapping[str, PropertyNode], root_name: str) -> list[str]:
    """Definition blocks for `graph`, enums first."""
    return _Synthesis().run(graph, root_name)


def _strip_cc(name: str) -> str:
    return name[3:] if name.startswith("cc.") else name


def _clean(name: str) -> str:
    return _NON_WORD.sub("_", _strip_cc(name))


def _short(name: str) -> str:
    return _strip_cc(name).rsplit(".", 1)[-1]


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def _literal(value: Any) -> str:
    if isinstance(value, str):
        return f"'{value}'"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _kind(value: Any) -> str:
    """JavaScript `typeof` of a primitive."""
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return "any"


def _is_primitive(value: Any) -> bool:
    return not isinstance(value, (Mapping, list))


class _Synthesis:
    """Name table and output buffers for one synthesis call."""

    def __init__(self):
        self.defined: set[str] = set()
        self.enums: list[str] = []
        self.classes: list[Optional[str]] = []

    def run(self, graph: Mapping[str, PropertyNode], root_name: str) -> list[str]:
        self.define_class(root_name, graph, root=True)
        return self.enums + [block for block in self.classes if block is not None]

    def define_class(self, class_name: str, fields: Mapping[str, PropertyNode],
                     extends: Optional[str] = None, root: bool = False) -> str:
        short = _short(class_name)
        if short in self.defined:
            return short
        self.defined.add(short)
        # Reserve the slot now so outer classes precede the nested ones they introduce
        slot = len(self.classes)
        self.classes.append(None)

        lines: list[str] = []
        for field_name, node in fields.items():
            try:
                lines.extend(self._field(class_name, field_name, node, root))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug("Cannot type %s.%s (%s); falling back to any", class_name, field_name, e)
                lines.append(f"\t{field_name}: any;")

        header = f"export class {short} extends {extends} {{" if extends else f"export class {short} {{"
        self.classes[slot] = "\n".join([header, *lines, "}"])
        return short

    def define_enum(self, name: str, members: list) -> None:
        if name in self.defined:
            return

        lines = [f"export enum {name} {{"]
        for member in members:
            member_name = _NON_WORD.sub("_", str(member.get("name")))
            if member_name[:1].isdigit():
                member_name = f"_{member_name}"
            lines.append(f"\t{member_name} = {_literal(member.get('value'))},")
        lines.append("}")
        # a member list that fails to render leaves the name free for a later field
        self.defined.add(name)
        self.enums.append("\n".join(lines))

    def _field(self, class_name: str, field_name: str, node: PropertyNode, root: bool) -> list[str]:
        if isinstance(node, Raw):
            if node.value is None:
                return []
            return [f"\t{field_name}: {self._raw_type(class_name, field_name, node.value)};"]
        if not node.schema.visible:
            return []
        readonly = node.schema.readonly or (root and field_name == "uuid")
        return self._wrapped_field(class_name, field_name, node, readonly)

    def _wrapped_field(self, class_name: str, field_name: str, prop: Wrapped, readonly: bool) -> list[str]:
        schema = prop.schema
        item: Optional[PropertyNode] = prop
        if schema.is_array:
            if schema.element_type_data is not None:
                item = schema.element_type_data
            elif isinstance(prop.value, list) and prop.value:
                item = prop.value[0]
            else:
                item = None

        if isinstance(item, Raw):
            ts_type = self._raw_type(class_name, field_name, item.value, suffix="Item")
        else:
            ts_type = self._wrapped_type(class_name, field_name, prop, item)
        if schema.is_array:
            ts_type = f"Array<{ts_type}>"

        lines = self._tooltip(schema.tooltip)
        decorator = self._decorator(prop)
        if decorator:
            lines.append(f"\t@property({{ {decorator} }})")
        prefix = "readonly " if readonly else ""
        lines.append(f"\t{prefix}{field_name}: {ts_type};")
        return lines

    def _wrapped_type(self, class_name: str, field_name: str, prop: Wrapped, item: Optional[Wrapped]) -> str:
        analyzed = (item or prop).schema
        raw_type = analyzed.type or "any"
        is_value_type = VALUE_TYPE in analyzed.extends
        is_reference = OBJECT_REFERENCE in analyzed.extends or (
            not is_value_type and raw_type in _REFERENCE_TYPES
        )
        ts_type = _strip_cc(_SCALARS.get(raw_type, raw_type))

        choices = analyzed.choices
        if raw_type in ENUM_KINDS and choices:
            enum_name = self._enum_name(class_name, field_name, prop, analyzed.user_data, raw_type)
            self.define_enum(enum_name, choices)
            ts_type = enum_name
        elif (item is not None and not is_reference and not is_value_type
              and raw_type not in PRIMITIVE_TYPES and isinstance(item.value, Mapping)):
            nested = _short(ts_type)
            if not nested or nested in ("Object", "any"):
                suffix = "Item" if prop.schema.is_array else "Type"
                nested = f"{_clean(class_name)}{_capitalize(field_name)}{suffix}"
            base = _short(item.schema.extends[0]) if item.schema.extends else None
            ts_type = self.define_class(nested, item.value, base if base != nested else None)

        if is_reference:
            if ts_type == "any":
                ts_type = "Object"
            ts_type = f"InstanceReference<{ts_type}>"
        return ts_type

    def _enum_name(self, class_name: str, field_name: str, prop: Wrapped,
                   user_data: Optional[dict], kind: str) -> str:
        if isinstance(user_data, Mapping) and user_data.get("enumName"):
            return user_data["enumName"]
        display = prop.schema.display_name
        if isinstance(display, str):
            # untranslated keys read worse than the field name
            if display.startswith(_I18N_PREFIX) or not display.strip():
                display = field_name
        else:
            display = _capitalize(field_name)
        return f"{_clean(class_name)}{_NON_WORD.sub('', display)}{kind}"

    def _raw_type(self, class_name: str, field_name: str, value: Any, suffix: str = "Type") -> str:
        if _is_primitive(value):
            return _kind(value)
        if isinstance(value, list):
            if not value:
                return "Array<any>"
            first = value[0]
            if isinstance(first, Raw):
                return f"Array<{self._raw_type(class_name, field_name, first.value, suffix='Item')}>"
            return f"Array<{self._wrapped_type(class_name, field_name, first, first)}>"
        nested = f"{_clean(class_name)}{_capitalize(field_name)}{suffix}"
        return self.define_class(nested, value)

    @staticmethod
    def _decorator(prop: Wrapped) -> str:
        schema = prop.schema
        parts = []
        decorator_type = _DECORATOR_TYPES.get(schema.type)
        if decorator_type:
            parts.append(f"type: [{decorator_type}]" if schema.is_array else f"type: {decorator_type}")
            for attr in _NUMERIC_HINTS:
                val = getattr(schema, attr)
                if val is not None and val is not MISSING:
                    parts.append(f"{attr}: {_literal(val)}")
        if schema.multiline is not None:
            parts.append(f"multiline: {_literal(schema.multiline)}")
        return ", ".join(parts)

    @staticmethod
    def _tooltip(tooltip: Optional[str]) -> list[str]:
        if not isinstance(tooltip, str) or tooltip.startswith(_I18N_PREFIX) or not tooltip.strip():
            return []
        if _HTML_BREAK.search(tooltip) or "\n" in tooltip:
            lines = [line.strip() for line in re.split(r"<br\s*/?>|\n", tooltip, flags=re.IGNORECASE)]
            lines = [line for line in lines if line]
            return ["\t/**", *(f"\t * {line}" for line in lines), "\t */"]
        return [f"\t/** {tooltip} */"]
