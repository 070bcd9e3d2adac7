"""Tests for inspector_mcp/properties/normalizer.py."""

from unittest.mock import AsyncMock

import pytest

from inspector_mcp.properties.errors import NotFound, ReferenceTypeMismatch
from inspector_mcp.properties.model import Schema
from inspector_mcp.properties.normalizer import (
    normalize, reference_uuid, resolve_reference, resolve_reference_list,
)

INTEGER = Schema(type="Integer")
STRING = Schema(type="String")
SPRITE_FRAME = Schema(type="cc.SpriteFrame", extends=["cc.Asset", "cc.Object"])
NODE_REF = Schema(type="cc.Node", extends=["cc.Object"])


class TestNormalize:
    def test_booleans(self):
        assert normalize("true", Schema(type="Boolean")) is True
        assert normalize("false", Schema(type="Boolean")) is False

    def test_integer(self):
        assert normalize("42", INTEGER) == 42
        assert isinstance(normalize("42", INTEGER), int)

    def test_float(self):
        assert normalize("1.5", Schema(type="Float")) == 1.5
        assert normalize("-2e3", Schema(type="Float")) == -2000.0

    def test_string_schema_keeps_text(self):
        assert normalize("42", STRING) == "42"
        assert normalize("true", STRING) == "true"

    def test_json_object(self):
        assert normalize('{"x": 1, "y": 2}', Schema(type="cc.Vec2")) == {"x": 1, "y": 2}

    def test_json_array(self):
        assert normalize("[1, 2]", INTEGER) == [1, 2]

    def test_broken_json_passes_through(self):
        assert normalize("{oops", Schema(type="cc.Vec2")) == "{oops"

    def test_non_strings_unchanged(self):
        assert normalize(3, INTEGER) == 3
        assert normalize({"uuid": "a"}, SPRITE_FRAME) == {"uuid": "a"}

    def test_unparseable_text_unchanged(self):
        assert normalize("hello", INTEGER) == "hello"

    def test_unknown_type_is_coerced(self):
        assert normalize("7", Schema()) == 7


class TestReferenceUuid:
    def test_forms(self):
        assert reference_uuid("abc") == {"uuid": "abc"}
        assert reference_uuid({"id": "abc"}) == {"uuid": "abc"}
        assert reference_uuid({"uuid": "abc"}) == {"uuid": "abc"}
        assert reference_uuid(None) is None

    def test_rejects_other_shapes(self):
        with pytest.raises(ReferenceTypeMismatch):
            reference_uuid(12)


class TestResolveReference:
    @pytest.mark.asyncio
    async def test_object_reference_not_checked(self):
        editor = AsyncMock()
        assert await resolve_reference({"id": "n1"}, NODE_REF, editor) == {"uuid": "n1"}
        editor.query_asset_info.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_matching_asset_type(self):
        editor = AsyncMock()
        editor.query_asset_info = AsyncMock(return_value={"uuid": "sf", "type": "cc.SpriteFrame"})
        assert await resolve_reference("sf", SPRITE_FRAME, editor) == {"uuid": "sf"}

    @pytest.mark.asyncio
    async def test_redirects_to_sub_asset(self):
        editor = AsyncMock()
        editor.query_asset_info = AsyncMock(return_value={
            "uuid": "img",
            "type": "cc.ImageAsset",
            "subAssets": {
                "6c48a": {"uuid": "img@6c48a", "type": "cc.Texture2D"},
                "f9941": {"uuid": "img@f9941", "type": "cc.SpriteFrame"},
            },
        })
        assert await resolve_reference("img", SPRITE_FRAME, editor) == {"uuid": "img@f9941"}

    @pytest.mark.asyncio
    async def test_mismatch(self):
        editor = AsyncMock()
        editor.query_asset_info = AsyncMock(return_value={"uuid": "m", "type": "cc.Material", "subAssets": {}})
        with pytest.raises(ReferenceTypeMismatch):
            await resolve_reference("m", SPRITE_FRAME, editor)

    @pytest.mark.asyncio
    async def test_unknown_asset(self):
        editor = AsyncMock()
        editor.query_asset_info = AsyncMock(return_value=None)
        with pytest.raises(NotFound):
            await resolve_reference("nope", SPRITE_FRAME, editor)

    @pytest.mark.asyncio
    async def test_clearing_a_reference(self):
        editor = AsyncMock()
        assert await resolve_reference(None, SPRITE_FRAME, editor) is None

    @pytest.mark.asyncio
    async def test_list(self):
        editor = AsyncMock()
        assert await resolve_reference_list(["a", {"id": "b"}], NODE_REF, editor) == [{"uuid": "a"}, {"uuid": "b"}]
