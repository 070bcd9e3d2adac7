"""Input validation helpers for inspector MCP tools.

Provides:
- Reference id sanitization (node, component and asset uuids)
- Property path sanitization (dot-separated segments)
- Settings type checks against the fixed settings ids
- Paired path/value list checks for batch sets
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional

from inspector_mcp.properties.inspector import COMMON_TYPES, CURRENT_SCENE_GLOBALS, PROJECT_SETTINGS

# Uuids, compressed uuids and sub-asset ids such as "abc@6c48a"
_SAFE_REFERENCE_RE = re.compile(r'^[A-Za-z0-9_\-@.]+$')
MAX_REFERENCE_LEN = 256

# Field names and array indices; "$" appears in some engine-private fields
_SAFE_SEGMENT_RE = re.compile(r'^[A-Za-z0-9_$]+$')
MAX_PATH_LEN = 512

SETTINGS_TYPES = (CURRENT_SCENE_GLOBALS, PROJECT_SETTINGS)
DEFINITION_SETTINGS_TYPES = (*SETTINGS_TYPES, COMMON_TYPES)


def sanitize_reference_id(reference_id: str, param_name: str = "reference_id") -> Optional[str]:
    """Validate an instance reference id. Returns error string or None."""
    if not reference_id or not isinstance(reference_id, str):
        return f"'{param_name}' must be a non-empty string"
    if len(reference_id) > MAX_REFERENCE_LEN:
        return f"'{param_name}' too long ({len(reference_id)} > {MAX_REFERENCE_LEN})"
    if not _SAFE_REFERENCE_RE.match(reference_id):
        return f"'{param_name}' contains invalid characters: {reference_id!r}"
    return None


def sanitize_property_path(path: str, param_name: str = "property_path") -> Optional[str]:
    """Validate a dot-separated property path like 'position.x' or 'passes.0.props.mainColor'."""
    if not path or not isinstance(path, str):
        return f"'{param_name}' must be a non-empty string"
    if len(path) > MAX_PATH_LEN:
        return f"'{param_name}' too long ({len(path)} > {MAX_PATH_LEN})"
    for segment in path.split("."):
        if not _SAFE_SEGMENT_RE.match(segment):
            return f"'{param_name}' has an invalid segment {segment!r} in {path!r}"
    return None


def sanitize_settings_type(settings_type: str, allowed: tuple[str, ...] = SETTINGS_TYPES,
                           param_name: str = "settings_type") -> Optional[str]:
    if settings_type not in allowed:
        return f"'{param_name}' must be one of: {', '.join(allowed)}"
    return None


def sanitize_paths_and_values(property_paths: Any, values: Any) -> Optional[str]:
    """Check the batch shape; count mismatches are left to the engine."""
    if not isinstance(property_paths, list) or not property_paths:
        return "'property_paths' must be a non-empty list"
    if not isinstance(values, list):
        return "'values' must be a list"
    for index, path in enumerate(property_paths):
        if err := sanitize_property_path(path, f"property_paths[{index}]"):
            return err
    return None


def make_error(message: str) -> str:
    """Create a JSON error response string."""
    return json.dumps({"error": message}, indent=2)
