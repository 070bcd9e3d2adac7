"""Type definition tools: TypeScript-like declarations of an instance's properties."""

from __future__ import annotations

import json
import logging

from editor_bridge import EditorBridgeError
from inspector_mcp.properties.errors import PropertyError

from ._validation import (
    DEFINITION_SETTINGS_TYPES, make_error, sanitize_reference_id, sanitize_settings_type,
)

logger = logging.getLogger("inspector-mcp.tools.definitions")


async def _definition(engine, reference_id: str) -> str:
    try:
        definition = await engine.definition(reference_id)
    except (PropertyError, EditorBridgeError) as e:
        return make_error(str(e))
    return json.dumps({"definition": definition}, indent=2)


def register(server, engine):
    @server.tool(
        name="inspector_get_instance_definition",
        description=(
            "Describe the properties of a scene node, component or asset as TypeScript-like "
            "class and enum declarations, including value ranges, enum choices and tooltips. "
            "Shared value types (Vec3, Color, InstanceReference...) are in the CommonTypes definition."
        ),
        annotations={
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def get_instance_definition(reference_id: str) -> str:
        if err := sanitize_reference_id(reference_id):
            return make_error(err)
        return await _definition(engine, reference_id)

    @server.tool(
        name="inspector_get_settings_definition",
        description=(
            "Describe the scene globals or project settings as TypeScript-like declarations. "
            "'CommonTypes' returns the shared value types referenced by every other definition."
        ),
        annotations={
            "readOnlyHint": True,
            "destructiveHint": False,
            "idempotentHint": True,
        },
    )
    async def get_settings_definition(settings_type: str) -> str:
        """settings_type is 'CurrentSceneGlobals', 'ProjectSettings' or 'CommonTypes'."""
        if err := sanitize_settings_type(settings_type, DEFINITION_SETTINGS_TYPES):
            return make_error(err)
        return await _definition(engine, settings_type)
