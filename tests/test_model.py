"""Tests for inspector_mcp/properties/model.py: ingestion into Wrapped/Raw nodes."""

from inspector_mcp.properties.model import (
    MISSING, PropertyGraph, Raw, Schema, Wrapped, ingest, is_wrapped_dump, schema_of,
)


class TestIsWrappedDump:
    def test_value_with_type(self):
        assert is_wrapped_dump({"value": 1, "type": "Integer"})

    def test_default_with_extends(self):
        assert is_wrapped_dump({"default": 0, "extends": []})

    def test_value_without_markers_is_raw(self):
        assert not is_wrapped_dump({"value": 1})

    def test_markers_without_value_is_raw(self):
        assert not is_wrapped_dump({"type": "Integer"})

    def test_non_mapping(self):
        assert not is_wrapped_dump([1, 2])
        assert not is_wrapped_dump("value")


class TestIngest:
    def test_wrapped_leaf(self):
        node = ingest({"value": 3, "type": "Integer", "min": 0, "readonly": True})
        assert isinstance(node, Wrapped)
        assert node.value == 3
        assert node.schema.type == "Integer"
        assert node.schema.min == 0
        assert node.schema.readonly is True
        assert node.schema.visible is True

    def test_raw_scalar(self):
        node = ingest(5)
        assert isinstance(node, Raw)
        assert node.value == 5

    def test_nested_values_are_ingested(self):
        node = ingest({"value": {"x": 1, "inner": {"value": 2, "type": "Float"}}, "type": "Thing"})
        assert isinstance(node.value["x"], Raw)
        assert isinstance(node.value["inner"], Wrapped)

    def test_list_elements_are_ingested(self):
        node = ingest([1, {"value": 2, "type": "Integer"}])
        assert isinstance(node, Raw)
        assert isinstance(node.value[0], Raw)
        assert isinstance(node.value[1], Wrapped)

    def test_missing_value(self):
        node = ingest({"default": 7, "type": "Integer"})
        assert node.value is MISSING
        assert not node.bound
        assert node.schema.default == 7

    def test_already_ingested_passes_through(self):
        raw = Raw(1)
        assert ingest(raw) is raw

    def test_element_type_data(self):
        node = ingest({
            "value": [],
            "type": "Integer",
            "isArray": True,
            "elementTypeData": {"value": 0, "type": "Integer", "min": 0},
        })
        assert node.schema.is_array
        assert isinstance(node.schema.element_type_data, Wrapped)
        assert node.schema.element_type_data.schema.min == 0

    def test_visible_false(self):
        assert ingest({"value": 1, "type": "Integer", "visible": False}).schema.visible is False


class TestSchema:
    def test_capabilities(self):
        schema = Schema.from_dump({"type": "cc.SpriteFrame", "extends": ["cc.Asset", "cc.Object"]})
        assert schema.is_reference
        assert schema.has_capability("cc.Asset")
        assert not schema.has_capability("cc.ValueType")

    def test_choices(self):
        schema = Schema.from_dump({"type": "BitMask", "bitmaskList": [{"name": "A", "value": 1}]})
        assert schema.choices == [{"name": "A", "value": 1}]

    def test_schema_of_raw_is_empty(self):
        assert schema_of(Raw(1)) == Schema()


class TestMissing:
    def test_singleton_and_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestPropertyGraph:
    def test_from_dump(self):
        graph = PropertyGraph.from_dump({"a": {"value": 1, "type": "Integer"}, "b": 2})
        assert set(graph) == {"a", "b"}
        assert len(graph) == 2
        assert isinstance(graph["a"], Wrapped)
        assert isinstance(graph["b"], Raw)

    def test_empty(self):
        assert len(PropertyGraph.from_dump(None)) == 0

    def test_hydrate_copies_schema(self):
        template = ingest({"value": 0, "type": "Integer", "min": 0})
        bound = template.hydrate(4)
        assert bound.value == 4
        assert bound.schema == template.schema
        assert bound.schema is not template.schema
