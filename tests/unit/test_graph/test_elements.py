"""
Unit tests for the element normalizer.

Covers decoding raw values into variants and normalizing variants into
GraphNode / GraphEdge records, including label priority and recursion
through list columns and paths.
"""

from __future__ import annotations

import pytest

from src.graph.elements import (
    ListValue,
    NodeValue,
    RelationshipValue,
    ScalarValue,
    decode_value,
    derive_label,
    normalize,
)
from src.graph.models import GraphEdge, GraphNode
from tests.fakes import FakeNode, FakePath, FakeRelationship, shire_graph

# =============================================================================
# Test: Decoding
# =============================================================================


class TestDecodeValue:
    """Tests for decode_value()."""

    def test_node_decodes_to_node_value(self) -> None:
        node = FakeNode("4:n:1", ["Character"], {"name": "Frodo"})

        value = decode_value(node)

        assert value == NodeValue("4:n:1", ("Character",), {"name": "Frodo"})

    def test_relationship_decodes_to_relationship_value(self) -> None:
        graph = shire_graph()

        value = decode_value(graph["lives_in"])

        assert isinstance(value, RelationshipValue)
        assert value.element_id == "5:r:1"
        assert value.type == "LIVES_IN"
        assert value.start_id == "4:n:1"
        assert value.end_id == "4:n:2"

    def test_list_decodes_element_wise(self) -> None:
        graph = shire_graph()

        value = decode_value([graph["frodo"], 42, graph["lives_in"]])

        assert isinstance(value, ListValue)
        assert [type(item) for item in value.items] == [
            NodeValue,
            ScalarValue,
            RelationshipValue,
        ]

    def test_nested_lists_decode_recursively(self) -> None:
        graph = shire_graph()

        value = decode_value([[graph["frodo"]], [graph["shire"]]])

        assert isinstance(value, ListValue)
        assert all(isinstance(item, ListValue) for item in value.items)

    def test_path_decodes_to_members(self) -> None:
        graph = shire_graph()
        path = FakePath([graph["frodo"], graph["shire"]], [graph["lives_in"]])

        value = decode_value(path)

        assert isinstance(value, ListValue)
        assert len(value.items) == 3

    @pytest.mark.parametrize("raw", [None, 7, 3.5, "Frodo", True, {"name": "Frodo"}])
    def test_other_values_are_scalars(self, raw: object) -> None:
        assert decode_value(raw) == ScalarValue(raw)

    def test_unordered_labels_are_sorted(self) -> None:
        node = FakeNode("4:n:9", frozenset({"Wizard", "Character"}))

        value = decode_value(node)

        assert isinstance(value, NodeValue)
        assert value.tags == ("Character", "Wizard")

    def test_ordered_labels_keep_order(self) -> None:
        node = FakeNode("4:n:9", ["Wizard", "Character"])

        value = decode_value(node)

        assert isinstance(value, NodeValue)
        assert value.tags == ("Wizard", "Character")


# =============================================================================
# Test: Label Derivation
# =============================================================================


class TestDeriveLabel:
    """Tests for name -> title -> first tag priority."""

    def test_name_wins_over_title(self) -> None:
        assert derive_label({"name": "Frodo", "title": "Ring-bearer"}, ("Character",)) == "Frodo"

    def test_title_when_no_name(self) -> None:
        assert derive_label({"title": "Ring-bearer"}, ("Character",)) == "Ring-bearer"

    def test_first_tag_when_neither(self) -> None:
        assert derive_label({"age": 50}, ("Character", "Hobbit")) == "Character"

    def test_empty_name_falls_through(self) -> None:
        assert derive_label({"name": "", "title": "Ring-bearer"}, ("Character",)) == "Ring-bearer"

    def test_no_fallback_beyond_tags(self) -> None:
        assert derive_label({}, ()) is None

    def test_label_is_verbatim(self) -> None:
        assert derive_label({"name": "  frodo  "}, ()) == "  frodo  "


# =============================================================================
# Test: Normalization
# =============================================================================


class TestNormalize:
    """Tests for normalize()."""

    def test_node_value_becomes_graph_node(self) -> None:
        node = FakeNode("4:n:1", ["Character"], {"name": "Frodo", "title": "Ring-bearer"})

        elements = normalize(decode_value(node))

        assert elements == [
            GraphNode(
                id="4:n:1",
                label="Frodo",
                type="Character",
                properties={"name": "Frodo", "title": "Ring-bearer"},
            )
        ]

    def test_relationship_value_becomes_graph_edge(self) -> None:
        graph = shire_graph()

        elements = normalize(decode_value(graph["lives_in"]))

        assert elements == [
            GraphEdge(id="5:r:1", from_id="4:n:1", to_id="4:n:2", label="LIVES_IN")
        ]

    def test_untagged_node_has_no_type(self) -> None:
        node = FakeNode("4:n:5", [], {})

        (element,) = normalize(decode_value(node))

        assert isinstance(element, GraphNode)
        assert element.type is None
        assert element.label is None

    def test_list_recurses(self) -> None:
        graph = shire_graph()

        elements = normalize(
            decode_value([[graph["frodo"], graph["shire"]], [graph["lives_in"]]])
        )

        assert [e.id for e in elements] == ["4:n:1", "4:n:2", "5:r:1"]

    def test_scalar_yields_nothing(self) -> None:
        assert normalize(decode_value("just text")) == []
        assert normalize(decode_value(None)) == []

    def test_properties_are_copied(self) -> None:
        source = {"name": "Frodo"}
        node = FakeNode("4:n:1", ["Character"], source)

        (element,) = normalize(decode_value(node))
        source["name"] = "Changed"

        assert element.properties["name"] == "Frodo"

    def test_properties_are_read_only(self) -> None:
        node = FakeNode("4:n:1", ["Character"], {"name": "Frodo"})

        (element,) = normalize(decode_value(node))

        with pytest.raises(TypeError):
            element.properties["name"] = "Sam"  # type: ignore[index]
