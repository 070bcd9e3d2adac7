"""Tool registry for the inspector MCP server."""

from .definitions import register as register_definitions
from .properties import register as register_properties


def register_all_tools(server, engine):
    """Register all tool modules with the MCP server."""
    register_properties(server, engine)
    register_definitions(server, engine)
