"""PropertyGraph model: tagged Wrapped/Raw nodes built from editor dumps.

Editor dumps mix schema-annotated properties ({"value": ..., "type": ...})
with bare values. `ingest()` is the only place that tells the two apart;
everything downstream dispatches on the node class instead of sniffing keys.

Container values are ingested element-wise, so every child of a list or a
map is itself a PropertyNode.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Iterator, Optional, Union

# Capability names carried in `extends` by the editor host
OBJECT_REFERENCE = "cc.Object"
ASSET_REFERENCE = "cc.Asset"
VALUE_TYPE = "cc.ValueType"

# A mapping is a wrapped property when it carries a value (or default)
# next to at least one of these keys
_SCHEMA_MARKERS = ("type", "extends", "visible")

# dump key -> Schema attribute
_SCHEMA_KEYS = {
    "type": "type",
    "isArray": "is_array",
    "enumList": "enum_list",
    "bitmaskList": "bitmask_list",
    "displayName": "display_name",
    "tooltip": "tooltip",
    "readonly": "readonly",
    "visible": "visible",
    "min": "min",
    "max": "max",
    "step": "step",
    "unit": "unit",
    "radian": "radian",
    "multiline": "multiline",
    "userData": "user_data",
}


class _Missing:
    """Sentinel for a property whose dump carries no value."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


@dataclass
class Schema:
    type: Optional[str] = None
    extends: list[str] = field(default_factory=list)
    is_array: bool = False
    enum_list: Optional[list] = None
    bitmask_list: Optional[list] = None
    element_type_data: Optional["Wrapped"] = None
    display_name: Optional[str] = None
    tooltip: Optional[str] = None
    readonly: bool = False
    visible: bool = True
    min: Any = None
    max: Any = None
    step: Any = None
    unit: Any = None
    radian: Any = None
    multiline: Any = None
    user_data: Optional[dict] = None
    default: Any = MISSING

    @classmethod
    def from_dump(cls, dump: Mapping) -> "Schema":
        kwargs: dict[str, Any] = {}
        for key, attr in _SCHEMA_KEYS.items():
            if key in dump and dump[key] is not None:
                kwargs[attr] = dump[key]
        extends = dump.get("extends")
        if extends:
            kwargs["extends"] = list(extends)
        if "default" in dump:
            kwargs["default"] = dump["default"]
        etd = dump.get("elementTypeData")
        if isinstance(etd, Mapping):
            kwargs["element_type_data"] = Wrapped.from_dump(etd)
        schema = cls(**kwargs)
        schema.readonly = bool(schema.readonly)
        schema.visible = schema.visible is not False
        schema.is_array = bool(schema.is_array)
        return schema

    def has_capability(self, name: str) -> bool:
        return name in self.extends

    @property
    def is_reference(self) -> bool:
        return OBJECT_REFERENCE in self.extends

    @property
    def choices(self) -> Optional[list]:
        return self.enum_list or self.bitmask_list


UNKNOWN_SCHEMA_TYPE = "Unknown"


@dataclass
class Wrapped:
    """A value with schema metadata.

    `value` is MISSING when the dump carried none; `template` holds the
    element template of an array extension point so deeper path segments
    can still be resolved.
    """

    schema: Schema
    value: Any = MISSING
    template: Any = MISSING

    @classmethod
    def from_dump(cls, dump: Mapping) -> "Wrapped":
        value = ingest_value(dump["value"]) if "value" in dump else MISSING
        return cls(schema=Schema.from_dump(dump), value=value)

    @property
    def bound(self) -> bool:
        return self.value is not MISSING

    def children(self) -> Any:
        """Node value to descend into when resolving a path."""
        if self.value is not MISSING:
            return self.value
        return self.template

    def hydrate(self, value: Any) -> "Wrapped":
        """Copy of this node's schema bound to another value."""
        return Wrapped(schema=replace(self.schema), value=value)


@dataclass
class Raw:
    """A bare value with no schema attached."""

    value: Any = None

    def children(self) -> Any:
        return self.value


PropertyNode = Union[Wrapped, Raw]


def is_wrapped_dump(obj: Any) -> bool:
    if not isinstance(obj, Mapping):
        return False
    if "value" not in obj and "default" not in obj:
        return False
    return any(marker in obj for marker in _SCHEMA_MARKERS)


def ingest(obj: Any) -> PropertyNode:
    """Classify one dump entry as Wrapped or Raw, recursively."""
    if isinstance(obj, (Wrapped, Raw)):
        return obj
    if is_wrapped_dump(obj):
        return Wrapped.from_dump(obj)
    return Raw(ingest_value(obj))


def ingest_value(obj: Any) -> Any:
    if isinstance(obj, Mapping):
        return {key: ingest(val) for key, val in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [ingest(item) for item in obj]
    return obj


def schema_of(node: Optional[PropertyNode]) -> Schema:
    """Schema of a node; raw nodes get an empty one."""
    if isinstance(node, Wrapped):
        return node.schema
    return Schema()


class PropertyGraph(Mapping):
    """Field name -> PropertyNode for one inspected instance."""

    def __init__(self, fields: Optional[dict[str, PropertyNode]] = None):
        self._fields: dict[str, PropertyNode] = dict(fields or {})

    @classmethod
    def from_dump(cls, dump: Optional[Mapping]) -> "PropertyGraph":
        if not dump:
            return cls()
        return cls({key: ingest(val) for key, val in dump.items()})

    def __getitem__(self, key: str) -> PropertyNode:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"PropertyGraph({self._fields!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PropertyGraph):
            return self._fields == other._fields
        return NotImplemented

    def children(self) -> dict[str, PropertyNode]:
        return self._fields
