"""
Element normalizer for raw Neo4j result values.

Raw column values are decoded once into a closed set of variants:

- NodeValue: a graph entity (type tags + property bag)
- RelationshipValue: a relationship instance (type tag + endpoints)
- ListValue: a list column or a whole path, decoded element-wise
- ScalarValue: anything else (numbers, strings, maps, None)

normalize() then dispatches on the variant to produce GraphNode /
GraphEdge records. Both steps are pure and do no I/O.

The shape tests mirror the public attributes of the driver's
``neo4j.graph.Node``, ``Relationship`` and ``Path`` types, so any object
exposing the same attributes decodes the same way.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from src.graph.models import GraphEdge, GraphNode

# =============================================================================
# Decoded Variants
# =============================================================================


@dataclass(frozen=True)
class NodeValue:
    element_id: str
    tags: tuple[str, ...]
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RelationshipValue:
    element_id: str
    type: str
    start_id: str
    end_id: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ListValue:
    items: tuple[StoreValue, ...] = ()


@dataclass(frozen=True)
class ScalarValue:
    value: Any = None


StoreValue = Union[NodeValue, RelationshipValue, ListValue, ScalarValue]


# =============================================================================
# Decoding
# =============================================================================


def _is_relationship(raw: Any) -> bool:
    return (
        hasattr(raw, "element_id")
        and hasattr(raw, "type")
        and hasattr(raw, "start_node")
        and hasattr(raw, "end_node")
    )


def _is_node(raw: Any) -> bool:
    return (
        hasattr(raw, "element_id")
        and hasattr(raw, "labels")
        and hasattr(raw, "items")
        and not hasattr(raw, "start_node")
    )


def _is_path(raw: Any) -> bool:
    return hasattr(raw, "nodes") and hasattr(raw, "relationships")


def _ordered_tags(tags: Iterable[str]) -> tuple[str, ...]:
    # The driver exposes labels as a frozenset; sort so the first tag is stable
    if isinstance(tags, (set, frozenset)):
        return tuple(sorted(tags))
    return tuple(tags)


def _endpoint_id(endpoint: Any) -> str | None:
    return getattr(endpoint, "element_id", None)


def decode_value(raw: Any) -> StoreValue:
    """Decode one raw result value into its variant."""
    if raw is None or isinstance(raw, (str, bytes)):
        return ScalarValue(raw)

    if _is_relationship(raw):
        start_id = _endpoint_id(raw.start_node)
        end_id = _endpoint_id(raw.end_node)
        if start_id is not None and end_id is not None:
            return RelationshipValue(
                element_id=raw.element_id,
                type=raw.type,
                start_id=start_id,
                end_id=end_id,
                properties=dict(raw.items()),
            )
        return ScalarValue(raw)

    if _is_node(raw):
        return NodeValue(
            element_id=raw.element_id,
            tags=_ordered_tags(raw.labels),
            properties=dict(raw.items()),
        )

    # Driver entities are Mappings too, so plain maps are only ruled out here
    if isinstance(raw, Mapping):
        return ScalarValue(raw)

    if _is_path(raw):
        members = [*raw.nodes, *raw.relationships]
        return ListValue(tuple(decode_value(member) for member in members))

    if isinstance(raw, (list, tuple)):
        return ListValue(tuple(decode_value(item) for item in raw))

    return ScalarValue(raw)


# =============================================================================
# Normalization
# =============================================================================


def derive_label(properties: Mapping[str, Any], tags: tuple[str, ...]) -> str | None:
    """Display label: name, else title, else the first type tag."""
    return properties.get("name") or properties.get("title") or (tags[0] if tags else None)


def to_graph_node(value: NodeValue) -> GraphNode:
    return GraphNode(
        id=value.element_id,
        label=derive_label(value.properties, value.tags),
        type=value.tags[0] if value.tags else None,
        properties=value.properties,
    )


def to_graph_edge(value: RelationshipValue) -> GraphEdge:
    return GraphEdge(
        id=value.element_id,
        from_id=value.start_id,
        to_id=value.end_id,
        label=value.type,
        properties=value.properties,
    )


def normalize(value: StoreValue) -> list[GraphNode | GraphEdge]:
    """Extract the nodes and edges carried by one decoded value.

    Lists recurse element-wise; scalars yield nothing.
    """
    if isinstance(value, NodeValue):
        return [to_graph_node(value)]
    if isinstance(value, RelationshipValue):
        return [to_graph_edge(value)]
    if isinstance(value, ListValue):
        elements: list[GraphNode | GraphEdge] = []
        for item in value.items:
            elements.extend(normalize(item))
        return elements
    return []
