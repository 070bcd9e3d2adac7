"""Resolve a dotted/indexed property path inside a PropertyGraph."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import replace
from typing import Any, Union

from .errors import IndexOutOfBounds, InvalidSegment, NotFound, SchemaMissing
from .model import (
    MISSING, UNKNOWN_SCHEMA_TYPE, PropertyGraph, PropertyNode, Schema, Wrapped,
)

_INDEX_RE = re.compile(r"^[0-9]+$")


def split_path(path: str) -> list[str]:
    if not path:
        raise InvalidSegment("Property path is empty", path=path)
    parts = path.split(".")
    if any(not part for part in parts):
        raise InvalidSegment("Property path contains an empty segment", path=path)
    return parts


def is_index(segment: str) -> bool:
    return bool(_INDEX_RE.match(segment))


def resolve(graph: Union[PropertyGraph, PropertyNode], path: str) -> PropertyNode:
    """Return the node addressed by `path`.

    Raw values met on the way are hydrated into Wrapped leaves: from the
    owning array's element schema, from the parent's default bag, or as an
    `Unknown`-typed leaf when no schema is available. An index equal to the
    array length yields an unbound extension point when the array declares
    an element schema.
    """
    parts = split_path(path)
    current: Union[PropertyGraph, PropertyNode] = graph

    for i, part in enumerate(parts):
        where = ".".join(parts[:i]) or "<root>"
        container = current.children()

        if isinstance(container, list):
            current = _resolve_index(current, container, part, where, path)
        elif isinstance(container, Mapping):
            current = _resolve_key(current, container, part, where, path)
        else:
            raise InvalidSegment(f"Segment '{part}' cannot be applied to a leaf value at '{where}'", path=path)

    return current


def _resolve_index(owner: Any, items: list, part: str, where: str, path: str) -> PropertyNode:
    if not is_index(part):
        raise InvalidSegment(f"Invalid array index '{part}' at '{where}'", path=path)

    idx = int(part)
    etd = owner.schema.element_type_data if isinstance(owner, Wrapped) else None

    if idx < len(items):
        elem = items[idx]
        if isinstance(elem, Wrapped):
            return elem
        if etd is not None:
            return etd.hydrate(elem.value)
        return _unknown(elem.value)

    if idx == len(items):
        if etd is None:
            raise SchemaMissing(f"Array extension at '{where}.{part}' failed: no element schema", path=path)
        return Wrapped(schema=replace(etd.schema), value=MISSING, template=etd.value)

    raise IndexOutOfBounds(f"Array index {idx} out of bounds (length: {len(items)}) at '{where}'", path=path)


def _resolve_key(owner: Any, fields: Mapping, part: str, where: str, path: str) -> PropertyNode:
    if part not in fields:
        if is_index(part):
            raise InvalidSegment(f"Array index '{part}' used against a map at '{where}'", path=path)
        raise NotFound(f"Key '{part}' not found in '{where}'", path=path)

    child = fields[part]
    if isinstance(child, Wrapped):
        return child

    fragment = _default_fragment(owner, part)
    if fragment is not None:
        return Wrapped(schema=Schema.from_dump(fragment), value=child.value)
    return _unknown(child.value)


def _default_fragment(owner: Any, part: str) -> Any:
    """Same-named schema fragment inside the parent's `default.value` bag."""
    if not isinstance(owner, Wrapped):
        return None
    default = owner.schema.default
    if not isinstance(default, Mapping):
        return None
    bag = default.get("value")
    if not isinstance(bag, Mapping):
        return None
    fragment = bag.get(part)
    return fragment if isinstance(fragment, Mapping) else None


def _unknown(value: Any) -> Wrapped:
    return Wrapped(schema=Schema(type=UNKNOWN_SCHEMA_TYPE), value=value)
