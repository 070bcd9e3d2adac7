"""Project a PropertyGraph into plain JSON for read responses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .model import MISSING, PropertyGraph, Raw, Wrapped, ingest


def unwrap(obj: Any) -> Any:
    """Plain JSON view of a graph, a node, or an arbitrary dump.

    Wrapped nodes collapse to their value (or default). Wrapped children
    marked invisible are dropped from their parent map entirely. Plain
    values come back unchanged.
    """
    if isinstance(obj, PropertyGraph):
        return _unwrap_fields(obj.children())
    if not isinstance(obj, (Wrapped, Raw)):
        obj = ingest(obj)
    return _unwrap_node(obj)


def _unwrap_node(node: Any) -> Any:
    if isinstance(node, Wrapped):
        if node.value is not MISSING:
            return _unwrap_value(node.value)
        if node.schema.default is not MISSING:
            return unwrap(node.schema.default)
        return None
    return _unwrap_value(node.value)


def _unwrap_value(value: Any) -> Any:
    if isinstance(value, Mapping):
        return _unwrap_fields(value)
    if isinstance(value, list):
        return [_unwrap_node(item) for item in value]
    return value


def _unwrap_fields(fields: Mapping) -> dict:
    result = {}
    for key, child in fields.items():
        if isinstance(child, Wrapped) and not child.schema.visible:
            continue
        result[key] = _unwrap_node(child)
    return result
