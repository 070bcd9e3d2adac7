"""Coerce caller-supplied values to the declared type of their target."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Optional

from .errors import NotFound, ReferenceTypeMismatch
from .model import ASSET_REFERENCE, Schema

logger = logging.getLogger("inspector-mcp.properties.normalizer")

STRING_TYPE = "String"

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
_INT_RE = re.compile(r"^[+-]?\d+$")


def normalize(raw: Any, schema: Schema) -> Any:
    """Parse text into a bool, number or JSON value for non-string targets.

    Lets value-typed fields be set through text-only channels. Strings that
    parse as none of these pass through untouched.
    """
    if not isinstance(raw, str) or schema.type == STRING_TYPE:
        return raw

    text = raw.strip()
    if text == "true":
        return True
    if text == "false":
        return False

    if _NUMBER_RE.match(text):
        if _INT_RE.match(text):
            return int(text)
        return float(text)

    if (text.startswith("{") and text.endswith("}")) or (text.startswith("[") and text.endswith("]")):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Value %r looks like JSON but does not parse; passing through", raw)

    return raw


def reference_uuid(value: Any) -> Optional[dict]:
    """Normalize an id, {id} or {uuid} into the host's {uuid} shape."""
    if value is None:
        return None
    if isinstance(value, str):
        return {"uuid": value}
    if isinstance(value, Mapping):
        if "id" in value:
            return {"uuid": value["id"]}
        if "uuid" in value:
            return {"uuid": value["uuid"]}
    raise ReferenceTypeMismatch(f"Cannot interpret {value!r} as an instance reference")


async def resolve_reference(value: Any, schema: Schema, editor) -> Optional[dict]:
    """Convert a caller reference to the host shape, checking asset kinds.

    For asset references whose asset has a different type than declared, the
    asset's sub-assets are searched for the first one of the declared type
    and the reference is redirected to it.
    """
    ref = reference_uuid(value)
    if ref is None or not schema.has_capability(ASSET_REFERENCE):
        return ref

    asset_info = await editor.query_asset_info(ref["uuid"])
    if not asset_info:
        raise NotFound(f"Asset with id {ref['uuid']} not found")

    actual = asset_info.get("type")
    if actual == schema.type:
        return ref

    for sub_asset in (asset_info.get("subAssets") or {}).values():
        if sub_asset.get("type") == schema.type:
            logger.debug("Redirecting reference %s to sub-asset %s (%s)", ref["uuid"], sub_asset.get("uuid"), schema.type)
            return {"uuid": sub_asset["uuid"]}

    raise ReferenceTypeMismatch(f"Reference type mismatch: expected {schema.type}, got {actual}")


async def resolve_reference_list(values: list, schema: Schema, editor) -> list:
    """Element-wise resolve_reference, awaited in order."""
    converted = []
    for item in values:
        converted.append(await resolve_reference(item, schema, editor))
    return converted
