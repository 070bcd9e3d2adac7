"""Importer protocol and the helpers asset categories share.

An importer owns the translation between one asset category's storage
(asset meta userData, material dumps, project config, ...) and the common
PropertyGraph shape. Helpers here are plain functions; importers compose
them rather than inherit from a base class.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from inspector_mcp.properties.errors import NotFound, ParseError
from inspector_mcp.properties.model import PropertyGraph

logger = logging.getLogger("inspector-mcp.importers")


@runtime_checkable
class AssetImporter(Protocol):
    """One asset category, dispatched by the asset's `importer` name."""

    name: str

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        """Graph of the asset's editable settings. Raises NotFound or ParseError."""
        ...

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        """Write one setting; False when the path is not one this category knows."""
        ...


# ─── Property dumps ─────────────────────────────────────────────────────────

def prop(value: Any, type_: str, display_name: Optional[str] = None, **schema: Any) -> dict:
    """Wrapped property dump; always carries `type` so ingestion tags it Wrapped."""
    dump = {"value": value, "type": type_}
    if display_name is not None:
        dump["displayName"] = display_name
    dump.update(schema)
    return dump


def choices(*names: str) -> list[dict]:
    """Enum list whose member names equal their values."""
    return [{"name": name, "value": name} for name in names]


def enum_prop(value: Any, enum_list: list, display_name: Optional[str] = None, **schema: Any) -> dict:
    return prop(value, "Enum", display_name, enumList=enum_list, **schema)


def find_sub_meta(meta: Mapping, importer: str) -> Optional[dict]:
    """First sub-meta produced by `importer`."""
    for sub_meta in (meta.get("subMetas") or {}).values():
        if sub_meta.get("importer") == importer:
            return sub_meta
    return None


# ─── Nested writes ──────────────────────────────────────────────────────────

def _child(container: Any, key: str) -> Any:
    if isinstance(container, Mapping):
        return container.get(key)
    if isinstance(container, list) and key.isdigit() and int(key) < len(container):
        return container[int(key)]
    return None


def _assign(container: Any, key: str, value: Any) -> bool:
    if isinstance(container, dict):
        container[key] = value
        return True
    if isinstance(container, list) and key.isdigit() and int(key) < len(container):
        container[int(key)] = value
        return True
    return False


def set_nested(container: dict, path: str, value: Any, create_missing: bool = False) -> bool:
    """Assign `value` at a dotted path inside plain storage.

    Returns False when an intermediate segment is missing, unless
    `create_missing` is set, in which case empty maps are created on the way.
    """
    parts = path.split(".")
    current: Any = container
    for part in parts[:-1]:
        nxt = _child(current, part)
        if nxt is None:
            if not create_missing or not isinstance(current, dict):
                return False
            nxt = current[part] = {}
        current = nxt
    return _assign(current, parts[-1], value)


def set_wrapped(container: Any, path: str, value: Any) -> bool:
    """Like set_nested, but steps through `{"value": ...}` wrappers.

    Intermediate segments missing on a wrapper are looked up in its value;
    a wrapped leaf gets its `value` replaced instead of the wrapper itself.
    """
    parts = path.split(".")
    current = container
    for part in parts[:-1]:
        nxt = _child(current, part)
        if nxt is None and isinstance(current, Mapping):
            nxt = _child(current.get("value"), part)
        if nxt is None:
            return False
        current = nxt

    last = parts[-1]
    for target in (current, current.get("value") if isinstance(current, Mapping) else None):
        existing = _child(target, last)
        if existing is None:
            continue
        if isinstance(existing, dict) and "value" in existing:
            existing["value"] = value
            return True
        return _assign(target, last, value)
    return False


# ─── Asset meta ─────────────────────────────────────────────────────────────

async def load_meta(editor, asset_info: Mapping, require_user_data: bool = True) -> dict:
    uuid = asset_info.get("uuid")
    meta = await editor.query_asset_meta(uuid)
    if not meta:
        raise NotFound(f"Asset meta not found for {uuid}", instance=uuid)
    if require_user_data and not meta.get("userData"):
        raise ParseError(f"UserData not found for asset {uuid}", instance=uuid)
    return meta


async def save_meta(editor, asset_info: Mapping, meta: dict) -> None:
    await editor.save_asset_meta(asset_info.get("uuid"), meta)
    logger.debug("Saved meta of %s", asset_info.get("uuid"))


UserDataWriter = Callable[[dict, str, Any], bool]


async def set_user_data(editor, asset_info: Mapping, path: str, value: Any, *,
                        synthetic: Optional[UserDataWriter] = None,
                        create_missing: bool = False) -> bool:
    """Load meta, write into userData, save.

    `synthetic` gets the first chance at the path; it handles fields that
    exist only in the graph and map back onto several stored ones. The meta
    is saved only when some writer handled the path.
    """
    meta = await load_meta(editor, asset_info, require_user_data=not create_missing)
    user_data = meta.setdefault("userData", {})
    handled = bool(synthetic and synthetic(user_data, path, value))
    if not handled:
        handled = set_nested(user_data, path, value, create_missing=create_missing)
    if handled:
        await save_meta(editor, asset_info, meta)
    return handled
