"""Shared fixtures for inspector-mcp tests."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add project root to path so we can import modules
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def mock_editor():
    """Mock AsyncEditorBridge for testing without a running editor.

    Lookups return None (nothing found) and writes succeed by default.
    Override specific methods in individual tests as needed.
    """
    editor = AsyncMock()
    editor.query_node = AsyncMock(return_value=None)
    editor.query_component = AsyncMock(return_value=None)
    editor.query_node_tree = AsyncMock(return_value=None)
    editor.query_asset_info = AsyncMock(return_value=None)
    editor.query_asset_meta = AsyncMock(return_value=None)
    editor.save_asset_meta = AsyncMock(return_value=True)
    editor.set_property = AsyncMock(return_value=True)
    editor.snapshot = AsyncMock(return_value=None)
    editor.broadcast = AsyncMock(return_value=None)
    editor.query_project_config = AsyncMock(return_value={})
    editor.set_project_config = AsyncMock(return_value=True)
    return editor


@pytest.fixture
def node_dump():
    """Scene node dump as the scene process returns it."""
    return {
        "uuid": {"value": "node-1", "type": "String", "readonly": True},
        "name": {"value": "Player", "type": "String"},
        "active": {"value": True, "type": "Boolean"},
        "position": {
            "value": {"x": 1, "y": 2, "z": 3},
            "type": "cc.Vec3",
            "extends": ["cc.ValueType"],
        },
        "layer": {
            "value": 1,
            "type": "Enum",
            "enumList": [{"name": "DEFAULT", "value": 1}, {"name": "UI_2D", "value": 2}],
        },
        "__comps__": [
            {"value": {"uuid": {"value": "comp-1"}, "name": {"value": "Sprite"}}, "type": "cc.Sprite"},
            {"value": {"uuid": {"value": "comp-2"}, "name": {"value": "Widget"}}, "type": "cc.Widget"},
        ],
        "children": [{"value": {"uuid": "child-1"}, "type": "cc.Node"}],
        "__type__": "cc.Node",
        "__prefab__": None,
    }


@pytest.fixture
def component_dump():
    return {
        "type": "cc.Sprite",
        "value": {
            "uuid": {"value": "comp-1", "type": "String", "visible": False},
            "enabled": {"value": True, "type": "Boolean", "visible": False},
            "node": {"value": {"uuid": "node-1"}, "type": "cc.Node", "extends": ["cc.Object"]},
            "color": {
                "value": {"r": 255, "g": 255, "b": 255, "a": 255},
                "type": "cc.Color",
                "extends": ["cc.ValueType"],
            },
            "spriteFrame": {
                "value": {"uuid": ""},
                "type": "cc.SpriteFrame",
                "extends": ["cc.Asset", "cc.Object"],
            },
        },
    }
