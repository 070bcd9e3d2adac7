"""Property access tools for the inspector MCP server."""

from __future__ import annotations

import json
import logging
from typing import Any

from editor_bridge import EditorBridgeError
from inspector_mcp.properties.errors import PartialSetError, PropertyError

from ._validation import (
    make_error, sanitize_paths_and_values, sanitize_reference_id, sanitize_settings_type,
)

logger = logging.getLogger("inspector-mcp.tools.properties")


async def _get(engine, reference_id: str) -> str:
    try:
        dump = await engine.get(reference_id)
    except (PropertyError, EditorBridgeError) as e:
        return make_error(str(e))
    return json.dumps({"dump": dump}, indent=2)


async def _set(engine, reference_id: str, property_paths: list[str], values: list[Any]) -> str:
    if err := sanitize_paths_and_values(property_paths, values):
        return make_error(err)
    try:
        result = await engine.set(reference_id, property_paths, values)
    except PartialSetError as e:
        return json.dumps(e.to_dict(), indent=2)
    except (PropertyError, EditorBridgeError) as e:
        return make_error(str(e))
    return json.dumps(result, indent=2)


def register(server, engine):
    @server.tool(
        name="inspector_get_instance_properties",
        description=(
            "Read every visible property of a scene node, component or asset as plain JSON. "
            "Use inspector_get_instance_definition first to learn the property paths."
        ),
        annotations={
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def get_instance_properties(reference_id: str) -> str:
        """reference_id is a node, component or asset uuid (e.g. 'c5a2f1b0-...' or 'abc@f9941')."""
        if err := sanitize_reference_id(reference_id):
            return make_error(err)
        return await _get(engine, reference_id)

    @server.tool(
        name="inspector_get_settings_properties",
        description="Read the current scene globals or the project settings as plain JSON.",
        annotations={
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def get_settings_properties(settings_type: str) -> str:
        """settings_type is 'CurrentSceneGlobals' or 'ProjectSettings'."""
        if err := sanitize_settings_type(settings_type):
            return make_error(err)
        return await _get(engine, settings_type)

    @server.tool(
        name="inspector_set_instance_properties",
        description=(
            "Set one or more properties on a scene node, component or asset. "
            "property_paths[i] receives values[i]. Paths are dot-separated "
            "(e.g. 'position.x', 'sharedMaterials.0'). Valid pairs are applied even when "
            "others fail; failures are listed under 'failed'."
        ),
        annotations={
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def set_instance_properties(reference_id: str, property_paths: list[str], values: list[Any]) -> str:
        """Reference values take {"uuid": "..."}; strings like "true" or "42" are coerced to the field type."""
        if err := sanitize_reference_id(reference_id):
            return make_error(err)
        return await _set(engine, reference_id, property_paths, values)

    @server.tool(
        name="inspector_set_settings_properties",
        description=(
            "Set one or more properties of the current scene globals or the project settings. "
            "Writing one index past the end of a layer list appends a new entry."
        ),
        annotations={
            "readOnlyHint": False,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def set_settings_properties(settings_type: str, property_paths: list[str], values: list[Any]) -> str:
        if err := sanitize_settings_type(settings_type):
            return make_error(err)
        return await _set(engine, settings_type, property_paths, values)
