"""
Inspector MCP Server - Gives agents property-level access to the scene editor.

Talks to the editor through its HTTP message bus (localhost:3000 by default).
Runs as an MCP server over stdio transport using FastMCP.

Usage:
    python inspector_mcp/mcp_server.py
    # or via entry point:
    inspector-mcp
"""

import asyncio
import atexit
import json
import logging
import os
import sys

# Ensure the project root is importable (for editor_bridge)
_parent_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _parent_dir not in sys.path:
    sys.path.insert(0, _parent_dir)

import httpx
from mcp.server.fastmcp import FastMCP
from editor_bridge import AsyncEditorBridge, BASE_URL
from inspector_mcp.__version__ import __version__
from inspector_mcp.importers import build_registry
from inspector_mcp.metrics import metrics
from inspector_mcp.properties import PropertyEngine
from inspector_mcp.tools import register_all_tools

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("inspector-mcp")

# Create server, bridge and engine
server = FastMCP("cocos-inspector")
editor = AsyncEditorBridge()
registry = build_registry(editor)
engine = PropertyEngine(editor, registry)

# Register all tool modules
register_all_tools(server, engine)


# ══════════════════════════════════════════════════════════════════════════════
# Graceful shutdown
# ══════════════════════════════════════════════════════════════════════════════

def _cleanup():
    """Close the bridge's connection pool on exit."""
    try:
        asyncio.run(editor.close())
    except RuntimeError as e:
        logger.debug("Cleanup skipped: %s", e)

atexit.register(_cleanup)


# ══════════════════════════════════════════════════════════════════════════════
# Tools defined here (need access to `editor` and `metrics` instances)
# ══════════════════════════════════════════════════════════════════════════════

@server.tool(
    name="editor_status",
    description="Check if the editor is running and its message bus is reachable.",
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
    },
)
async def status() -> str:
    """Returns connection status and editor info if available."""
    connected = await editor.is_connected()
    if connected:
        try:
            info = await editor.info()
            return json.dumps({
                "connected": True,
                "version": __version__,
                "info": info,
            }, indent=2)
        except (httpx.HTTPError, ValueError) as e:
            return json.dumps({
                "connected": True,
                "version": __version__,
                "info_error": str(e),
            }, indent=2)
    return json.dumps({
        "connected": False,
        "version": __version__,
        "message": f"Editor not reachable at {BASE_URL}. Open the project with the bridge extension enabled.",
    }, indent=2)


@server.tool(
    name="editor_health_check",
    description=(
        "Get bridge health: version, uptime, circuit breaker state, "
        "engine operation stats (get/set/definition calls, failures, latency), "
        "editor requests per channel, loaded importers. "
        "Use this to diagnose connection issues."
    ),
    annotations={
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
    },
)
async def health_check() -> str:
    connected = await editor.is_connected()
    snap = metrics.snapshot()

    return json.dumps({
        "version": __version__,
        "connected": connected,
        "base_url": BASE_URL,
        "circuit_breaker": editor._cb.snapshot(),
        "importers": sorted(registry),
        "uptime_s": snap["uptime_s"],
        "operations": snap["operations"],
        "channels": snap["channels"],
        "counters": snap["counters"],
        "latencies": snap["latencies"],
    }, indent=2)


# ══════════════════════════════════════════════════════════════════════════════
# Startup
# ══════════════════════════════════════════════════════════════════════════════

def _startup_checks():
    """Log startup info."""
    logger.info("inspector-mcp v%s starting (stdio transport)", __version__)
    logger.info("Editor message bus endpoint: %s", BASE_URL)
    logger.info("Loaded %d asset importers: %s", len(registry), ", ".join(sorted(registry)))


def main():
    """Entry point for the MCP server."""
    _startup_checks()
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
