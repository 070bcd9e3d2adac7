"""typescript assets: a readonly preview of the source file."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

from inspector_mcp.properties.errors import NotFound
from inspector_mcp.properties.model import PropertyGraph

from .base import prop

logger = logging.getLogger("inspector-mcp.importers.script")

MAX_PREVIEW_CHARS = int(os.environ.get("INSPECTOR_SCRIPT_MAX_CHARS", "20000"))
MAX_PREVIEW_LINES = int(os.environ.get("INSPECTOR_SCRIPT_MAX_LINES", "400"))
TRUNCATED_MARKER = "\n... (truncated)"


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def preview(content: str) -> str:
    """Clip to the character, then the line budget; mark any clipping."""
    truncated = False
    if len(content) > MAX_PREVIEW_CHARS:
        content = content[:MAX_PREVIEW_CHARS]
        truncated = True
    lines = content.split("\n")
    if len(lines) > MAX_PREVIEW_LINES:
        content = "\n".join(lines[:MAX_PREVIEW_LINES])
        truncated = True
    return content + TRUNCATED_MARKER if truncated else content


class ScriptImporter:
    name = "typescript"

    def __init__(self, editor):
        self.editor = editor

    async def get_properties(self, asset_info: dict) -> PropertyGraph:
        path = asset_info.get("file")
        if not path or not os.path.isfile(path):
            raise NotFound(f"File not found for asset {asset_info.get('uuid')}", instance=asset_info.get("uuid"))

        try:
            content = preview(await asyncio.to_thread(_read_text, path))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read script %s: %s", path, e)
            return PropertyGraph.from_dump({
                "error": prop(f"Failed to read script file: {e}", "String", "Error", readonly=True),
            })

        return PropertyGraph.from_dump({
            "content": prop(content, "String", "Content", readonly=True),
            "language": prop(self.name, "String", "Language", readonly=True),
        })

    async def set_property(self, asset_info: dict, path: str, value: Any) -> bool:
        logger.warning("Script assets are read-only here; '%s' not set on %s", path, asset_info.get("uuid"))
        return False
