"""Tests for design payload helpers."""

import pytest

from dsos.mcp import (
    InvalidDesignContext,
    collections_from_defs,
    format_variable_value,
    node_data_from_context,
    to_design_node,
    variables_from_defs,
)


class TestNodeData:

    def test_document_first(self):
        context = {"document": {"id": "1"}, "node": {"id": "2"}, "id": "3"}
        assert node_data_from_context(context) == {"id": "1"}

    def test_node_second(self):
        assert node_data_from_context({"node": {"id": "2"}, "id": "3"}) == {"id": "2"}

    def test_payload_itself(self):
        assert node_data_from_context({"id": "3", "name": "Card"})["name"] == "Card"

    @pytest.mark.parametrize("context", [None, "text", [], {"name": "no id"}])
    def test_invalid(self, context):
        with pytest.raises(InvalidDesignContext):
            node_data_from_context(context)


class TestVariables:

    def test_meta_preferred(self):
        defs = {"meta": {"variables": {"a": 1}}, "variables": {"b": 2}}
        assert variables_from_defs(defs) == {"a": 1}

    def test_root_fallback(self):
        assert variables_from_defs({"variables": {"b": 2}}) == {"b": 2}
        assert collections_from_defs({"variableCollections": {"c": {}}}) == {"c": {}}

    def test_missing(self):
        assert variables_from_defs(None) == {}
        assert collections_from_defs({"meta": {}}) == {}


class TestFormatVariableValue:

    def test_color(self):
        value = {"r": 1, "g": 0.5, "b": 0, "a": 0.5}
        assert format_variable_value(value, "COLOR") == "rgba(255, 128, 0, 0.5)"

    def test_color_alpha_defaults_to_one(self):
        assert format_variable_value({"r": 0, "g": 0, "b": 0}, "COLOR") == "rgba(0, 0, 0, 1)"

    def test_float(self):
        assert format_variable_value(16.0, "FLOAT") == "16px"
        assert format_variable_value(1.5, "FLOAT") == "1.5px"

    def test_other(self):
        assert format_variable_value("Inter", "STRING") == "Inter"
        assert format_variable_value(True, "BOOLEAN") == "True"


class TestToDesignNode:

    def test_full_node(self):
        node = to_design_node(
            {
                "id": "1:2",
                "name": "Button",
                "type": "COMPONENT",
                "fills": [{"type": "SOLID"}],
                "absoluteBoundingBox": {"x": 0, "y": 0, "width": 10, "height": 4},
                "layoutMode": "HORIZONTAL",
                "itemSpacing": 8,
                "opacity": None,
            }
        )

        assert node.id == "1:2"
        assert node.fills == [{"type": "SOLID"}]
        assert node.absolute_bounding_box["width"] == 10
        assert node.properties == {"layoutMode": "HORIZONTAL", "itemSpacing": 8}

    def test_fallback_names(self):
        node = to_design_node({"nodeId": "9", "componentName": "Chip", "bounds": {"x": 1}})
        assert node.id == "9"
        assert node.name == "Chip"
        assert node.type == "COMPONENT"
        assert node.absolute_bounding_box == {"x": 1}

    def test_empty(self):
        node = to_design_node({})
        assert node.id is None
        assert node.name == "Component"
        assert node.children == []
