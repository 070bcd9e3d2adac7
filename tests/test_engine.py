"""Tests for PropertyEngine with the inspector and applier behind it.

Uses the real importer registry on top of the mock_editor fixture.
"""

import copy
from unittest.mock import AsyncMock

import pytest

from editor_bridge import EditorConnectionError, EditorRequestError
from inspector_mcp.importers import build_registry
from inspector_mcp.metrics import metrics
from inspector_mcp.properties import PartialSetError, PropertyEngine
from inspector_mcp.properties.errors import CountMismatch, NotFound, ParseError
from inspector_mcp.properties.inspector import (
    KIND_ASSET, KIND_COMPONENT, KIND_NODE, KIND_SCENE_GLOBALS, adapt_node_dump, component_index,
)
from inspector_mcp.properties.typedef import COMMON_TYPES_DEFINITION

TEXTURE_INFO = {"uuid": "tex-1", "type": "cc.Texture2D", "importer": "texture"}
TEXTURE_META = {
    "userData": {
        "minfilter": "linear", "magfilter": "linear", "mipfilter": "none",
        "wrapModeS": "repeat", "wrapModeT": "repeat", "anisotropy": 0,
    },
}


@pytest.fixture
def engine(mock_editor):
    return PropertyEngine(mock_editor, build_registry(mock_editor))


@pytest.fixture
def scene(mock_editor, node_dump, component_dump):
    """Editor that knows one node (node-1) and its component (comp-1)."""
    async def query_node(uuid):
        return copy.deepcopy(node_dump) if uuid == "node-1" else None

    async def query_component(uuid):
        return copy.deepcopy(component_dump) if uuid == "comp-1" else None

    mock_editor.query_node = AsyncMock(side_effect=query_node)
    mock_editor.query_component = AsyncMock(side_effect=query_component)
    return mock_editor


@pytest.fixture
def texture(mock_editor):
    async def query_asset_info(uuid):
        return dict(TEXTURE_INFO) if uuid == "tex-1" else None

    async def query_asset_meta(uuid):
        return copy.deepcopy(TEXTURE_META)

    mock_editor.query_asset_info = AsyncMock(side_effect=query_asset_info)
    mock_editor.query_asset_meta = AsyncMock(side_effect=query_asset_meta)
    return mock_editor


# ── Inspection ───────────────────────────────────────────────────────────────

class TestInspect:
    @pytest.mark.asyncio
    async def test_node(self, engine, scene):
        info = await engine.inspector.inspect("node-1")
        assert info.kind == KIND_NODE
        assert info.type == "cc.Node"
        assert not info.asset_backed

    @pytest.mark.asyncio
    async def test_component(self, engine, scene):
        info = await engine.inspector.inspect("comp-1")
        assert info.kind == KIND_COMPONENT
        assert info.type == "cc.Sprite"

    @pytest.mark.asyncio
    async def test_asset(self, engine, texture):
        info = await engine.inspector.inspect("tex-1")
        assert info.kind == KIND_ASSET
        assert info.asset_backed
        assert info.asset_info["importer"] == "texture"

    @pytest.mark.asyncio
    async def test_host_refusal_falls_through(self, engine, texture):
        texture.query_node = AsyncMock(side_effect=EditorRequestError("scene", "query-node", "invalid uuid"))
        info = await engine.inspector.inspect("tex-1")
        assert info.kind == KIND_ASSET

    @pytest.mark.asyncio
    async def test_unknown_id(self, engine, mock_editor):
        assert await engine.inspector.inspect("nothing") is None

    @pytest.mark.asyncio
    async def test_unregistered_importer_has_no_graph(self, engine, mock_editor):
        mock_editor.query_asset_info = AsyncMock(return_value={"uuid": "x", "type": "cc.Foo", "importer": "foo"})
        info = await engine.inspector.inspect("x")
        assert info.graph is None


class TestNodeAdaptation:
    def test_components_become_references(self, node_dump):
        fields = adapt_node_dump(node_dump)
        comps = fields["__comps__"]
        assert comps["isArray"] is True
        assert [c["value"] for c in comps["value"]] == [{"id": "comp-1"}, {"id": "comp-2"}]
        assert fields["children"]["readonly"] is True
        assert fields["__type__"]["visible"] is False
        assert "__prefab__" not in fields

    def test_missing_required_key(self, node_dump):
        del node_dump["children"]
        with pytest.raises(ParseError):
            adapt_node_dump(node_dump)

    def test_component_index(self, node_dump):
        assert component_index(node_dump, "comp-2") == 1
        assert component_index(node_dump, "comp-9") == -1


# ── get ──────────────────────────────────────────────────────────────────────

class TestGet:
    @pytest.mark.asyncio
    async def test_node(self, engine, scene):
        dump = await engine.get("node-1")
        assert dump["name"] == "Player"
        assert dump["position"] == {"x": 1, "y": 2, "z": 3}
        assert dump["__comps__"] == [{"id": "comp-1"}, {"id": "comp-2"}]
        assert dump["children"] == []
        assert "__type__" not in dump

    @pytest.mark.asyncio
    async def test_component_surfaces_enabled(self, engine, scene):
        dump = await engine.get("comp-1")
        assert dump["enabled"] is True
        assert "uuid" not in dump
        assert dump["node"] == {"uuid": "node-1"}

    @pytest.mark.asyncio
    async def test_texture_asset(self, engine, texture):
        dump = await engine.get("tex-1")
        assert dump == {"filterMode": "Bilinear", "wrapMode": "Repeat", "anisotropy": 0, "generateMipmaps": False}

    @pytest.mark.asyncio
    async def test_not_found(self, engine, mock_editor):
        with pytest.raises(NotFound):
            await engine.get("nothing")

    @pytest.mark.asyncio
    async def test_asset_without_importer(self, engine, mock_editor):
        mock_editor.query_asset_info = AsyncMock(return_value={"uuid": "x", "type": "cc.Foo", "importer": "foo"})
        with pytest.raises(NotFound):
            await engine.get("x")

    @pytest.mark.asyncio
    async def test_scene_globals(self, engine, mock_editor):
        mock_editor.query_node_tree = AsyncMock(return_value={"uuid": "scene-1"})
        mock_editor.query_node = AsyncMock(return_value={
            "_globals": {
                "ambient": {"value": {"skyIllum": {"value": 20000, "type": "Float"}}, "type": "cc.AmbientInfo"},
            },
        })
        assert await engine.get("CurrentSceneGlobals") == {"ambient": {"skyIllum": 20000}}

    @pytest.mark.asyncio
    async def test_scene_globals_without_scene(self, engine, mock_editor):
        with pytest.raises(NotFound):
            await engine.get("CurrentSceneGlobals")


# ── set ──────────────────────────────────────────────────────────────────────

class TestSet:
    @pytest.mark.asyncio
    async def test_node_fields(self, engine, scene):
        result = await engine.set("node-1", ["position.x", "name"], ["5", "Hero"])
        assert result == {"success": True}
        scene.set_property.assert_any_await("node-1", "position.x", {"value": 5, "type": "Unknown"})
        scene.set_property.assert_any_await("node-1", "name", {"value": "Hero", "type": "String"})
        assert scene.snapshot.await_count == 2

    @pytest.mark.asyncio
    async def test_string_field_keeps_text(self, engine, scene):
        await engine.set("node-1", ["name"], ["42"])
        scene.set_property.assert_awaited_once_with("node-1", "name", {"value": "42", "type": "String"})

    @pytest.mark.asyncio
    async def test_count_mismatch_touches_nothing(self, engine, scene):
        with pytest.raises(CountMismatch):
            await engine.set("node-1", ["a", "b"], [1])
        scene.query_node.assert_not_awaited()
        scene.set_property.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_partial_set(self, engine, scene):
        metrics.reset()
        with pytest.raises(PartialSetError) as exc:
            await engine.set("node-1", ["name", "a.missing"], ["Hero", 1])
        scene.set_property.assert_awaited_once_with("node-1", "name", {"value": "Hero", "type": "String"})

        report = exc.value.to_dict()
        assert report["success"] is False
        assert [f["path"] for f in report["failed"]] == ["a.missing"]
        assert "a.missing" in report["error"]
        assert exc.value.instance == "node-1"

        snap = metrics.snapshot()
        assert snap["counters"]["properties.set.success"] == 1
        assert snap["counters"]["properties.set.error"] == 1
        assert snap["operations"]["set"]["calls"] == 1
        assert snap["operations"]["set"]["failed"] == 1

    @pytest.mark.asyncio
    async def test_invisible_field_is_settable(self, engine, scene, node_dump):
        node_dump["hidden"] = {"value": 1, "type": "Integer", "visible": False}
        assert "hidden" not in await engine.get("node-1")
        await engine.set("node-1", ["hidden"], [2])
        scene.set_property.assert_awaited_once_with("node-1", "hidden", {"value": 2, "type": "Integer"})

    @pytest.mark.asyncio
    async def test_component_is_written_through_its_node(self, engine, scene):
        color = {"r": 0, "g": 0, "b": 0, "a": 255}
        await engine.set("comp-1", ["color"], [color])
        scene.set_property.assert_awaited_once_with(
            "node-1", "__comps__.0.color", {"value": color, "type": "cc.Color"},
        )

    @pytest.mark.asyncio
    async def test_asset_reference_redirected_to_sub_asset(self, engine, scene):
        scene.query_asset_info = AsyncMock(return_value={
            "uuid": "img",
            "type": "cc.ImageAsset",
            "subAssets": {"f9941": {"uuid": "img@f9941", "type": "cc.SpriteFrame"}},
        })
        await engine.set("comp-1", ["spriteFrame"], ["img"])
        scene.set_property.assert_awaited_once_with(
            "node-1", "__comps__.0.spriteFrame", {"value": {"uuid": "img@f9941"}, "type": "cc.SpriteFrame"},
        )

    @pytest.mark.asyncio
    async def test_reference_array_resolved_per_element(self, engine, scene, component_dump):
        material_ref = {"value": {"uuid": ""}, "type": "cc.Material", "extends": ["cc.Asset", "cc.Object"]}
        component_dump["value"]["sharedMaterials"] = {
            "value": [dict(material_ref, value={"uuid": "mat-0"})],
            "type": "cc.Material",
            "isArray": True,
            "elementTypeData": material_ref,
        }
        assets = {
            "fbx": {
                "uuid": "fbx", "type": "cc.Prefab",
                "subAssets": {
                    "mesh": {"uuid": "fbx@0", "type": "cc.Mesh"},
                    "mat": {"uuid": "fbx@1", "type": "cc.Material"},
                },
            },
            "mat-2": {"uuid": "mat-2", "type": "cc.Material"},
        }
        scene.query_asset_info = AsyncMock(side_effect=lambda uuid: assets.get(uuid))

        await engine.set("comp-1", ["sharedMaterials"], ['["fbx", {"uuid": "mat-2"}]'])
        scene.set_property.assert_awaited_once_with(
            "node-1", "__comps__.0.sharedMaterials",
            {"value": [{"uuid": "fbx@1"}, {"uuid": "mat-2"}], "type": "cc.Material"},
        )
        assert [c.args for c in scene.query_asset_info.await_args_list] == [("fbx",), ("mat-2",)]

    @pytest.mark.asyncio
    async def test_component_without_listed_slot(self, engine, scene, node_dump):
        node_dump["__comps__"] = node_dump["__comps__"][1:]
        with pytest.raises(PartialSetError) as exc:
            await engine.set("comp-1", ["color"], [{"r": 0}])
        assert "__comps__" in exc.value.failures[0].message

    @pytest.mark.asyncio
    async def test_scene_globals_prefix(self, engine, mock_editor):
        mock_editor.query_node_tree = AsyncMock(return_value={"uuid": "scene-1"})
        mock_editor.query_node = AsyncMock(return_value={
            "_globals": {
                "ambient": {"value": {"skyIllum": {"value": 20000, "type": "Float"}}, "type": "cc.AmbientInfo"},
            },
        })
        await engine.set("CurrentSceneGlobals", ["ambient.skyIllum"], ["100"])
        mock_editor.set_property.assert_awaited_once_with(
            "scene-1", "_globals.ambient.skyIllum", {"value": 100, "type": "Float"},
        )

    @pytest.mark.asyncio
    async def test_editor_failure_is_collected(self, engine, scene):
        scene.set_property = AsyncMock(side_effect=EditorConnectionError("Connection failed"))
        with pytest.raises(PartialSetError) as exc:
            await engine.set("node-1", ["name", "active"], ["Hero", "false"])
        assert [f.path for f in exc.value.failures] == ["name", "active"]
        assert "Connection failed" in exc.value.failures[0].message

    @pytest.mark.asyncio
    async def test_asset_through_importer(self, engine, texture):
        await engine.set("tex-1", ["filterMode"], ["Trilinear with Mipmaps"])
        uuid, meta = texture.save_asset_meta.await_args.args
        assert uuid == "tex-1"
        assert meta["userData"]["mipfilter"] == "linear"
        texture.set_property.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_importer_refusal(self, engine, mock_editor):
        mock_editor.query_asset_info = AsyncMock(return_value={
            "uuid": "rt", "type": "cc.RenderTexture", "importer": "render-texture",
        })
        mock_editor.query_asset_meta = AsyncMock(return_value={
            "userData": {"width": 64, "height": 64, "mipfilter": "none"},
            "subMetas": {"f9941": {"uuid": "rt@f9941", "importer": "sprite-frame"}},
        })
        with pytest.raises(PartialSetError) as exc:
            await engine.set("rt", ["spriteFrame", "width"], [{"uuid": "other"}, 128])
        assert [f.path for f in exc.value.failures] == ["spriteFrame"]
        assert "did not handle" in exc.value.failures[0].message


# ── definition ───────────────────────────────────────────────────────────────

class TestDefinition:
    @pytest.mark.asyncio
    async def test_common_types(self, engine, mock_editor):
        assert await engine.definition("CommonTypes") == COMMON_TYPES_DEFINITION
        mock_editor.query_node.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_node(self, engine, scene):
        definition = await engine.definition("node-1")
        assert "export class Node {" in definition
        assert "\treadonly uuid: string;" in definition
        assert "\t__comps__: Array<InstanceReference<Component>>;" in definition
        assert "\treadonly children: Array<InstanceReference<Node>>;" in definition
        assert "__type__" not in definition

    @pytest.mark.asyncio
    async def test_asset_root_is_named_after_importer(self, engine, texture):
        definition = await engine.definition("tex-1")
        assert "export class Texture2DImporter {" in definition
        assert "export enum Texture2DImporterFilterModeEnum {" in definition

    @pytest.mark.asyncio
    async def test_not_found(self, engine, mock_editor):
        with pytest.raises(NotFound):
            await engine.definition("nothing")

    @pytest.mark.asyncio
    async def test_asset_without_importer_has_no_definition(self, engine, mock_editor):
        mock_editor.query_asset_info = AsyncMock(return_value={"uuid": "x", "type": "cc.Foo", "importer": "foo"})
        assert await engine.definition("x") == ""
