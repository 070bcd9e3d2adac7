"""Tests for the tools defined in inspector_mcp/mcp_server.py."""

import json
from unittest.mock import AsyncMock

import pytest

from inspector_mcp import mcp_server
from inspector_mcp.__version__ import __version__


def test_every_tool_registered():
    tools = set(mcp_server.server._tool_manager._tools)
    assert {"editor_status", "editor_health_check", "inspector_get_instance_properties",
            "inspector_get_settings_definition"} <= tools


@pytest.mark.asyncio
async def test_status_offline(monkeypatch):
    monkeypatch.setattr(mcp_server.editor, "is_connected", AsyncMock(return_value=False))
    data = json.loads(await mcp_server.status())
    assert data["connected"] is False
    assert data["version"] == __version__
    assert mcp_server.BASE_URL in data["message"]


@pytest.mark.asyncio
async def test_status_online(monkeypatch):
    monkeypatch.setattr(mcp_server.editor, "is_connected", AsyncMock(return_value=True))
    monkeypatch.setattr(mcp_server.editor, "info", AsyncMock(return_value={"version": "3.8.0"}))
    data = json.loads(await mcp_server.status())
    assert data["info"] == {"version": "3.8.0"}


@pytest.mark.asyncio
async def test_health_check(monkeypatch):
    monkeypatch.setattr(mcp_server.editor, "is_connected", AsyncMock(return_value=True))
    data = json.loads(await mcp_server.health_check())
    assert data["circuit_breaker"]["state"] == "closed"
    assert "project-settings" in data["importers"]
    assert {"uptime_s", "operations", "channels", "counters", "latencies"} <= set(data)
