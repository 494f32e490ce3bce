"""
Graph projection records and query inputs.

GraphNode / GraphEdge / GraphData are the renderer-facing projection
produced by the engine. FilterSpec is the engine's query input;
GraphQueryRequest is the tool-layer model that validates raw tool
arguments and applies the depth clamping policy before building one.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.core.config import get_settings


def _frozen_properties(properties: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(dict(properties))


# =============================================================================
# Projection Records
# =============================================================================


@dataclass(frozen=True)
class GraphNode:
    """One graph entity.

    Attributes:
        id: Store element id; stable within one store instance only
        label: Display label (name, else title, else first type tag)
        type: Primary type tag (first tag), None for untagged entities
        properties: Read-only copy of the entity attributes
    """

    id: str
    label: str | None
    type: str | None
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _frozen_properties(self.properties))

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True)
class GraphEdge:
    """One directed relationship instance.

    Attributes:
        id: Store element id of the relationship
        from_id: Element id of the start node
        to_id: Element id of the end node
        label: Relationship type tag
        properties: Read-only copy of the relationship attributes
    """

    id: str
    from_id: str
    to_id: str
    label: str
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _frozen_properties(self.properties))

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self) -> dict[str, Any]:
        """Renderer payload; endpoints use the ``from``/``to`` keys."""
        return {
            "id": self.id,
            "from": self.from_id,
            "to": self.to_id,
            "label": self.label,
            "properties": dict(self.properties),
        }


@dataclass
class GraphData:
    """Deduplicated projection of nodes and edges.

    Collection order follows the store's row order and is not a contract.
    """

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    @property
    def edge_ids(self) -> set[str]:
        return {edge.id for edge in self.edges}

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    def summary(self) -> str:
        """One-line description for tool text output."""
        return f"{len(self.nodes)} nodes, {len(self.edges)} edges."


@dataclass(frozen=True)
class GraphSchema:
    """Distinct node labels and relationship types known to the store."""

    node_labels: frozenset[str] = frozenset()
    relationship_types: frozenset[str] = frozenset()


# =============================================================================
# Query Inputs
# =============================================================================


@dataclass(frozen=True)
class FilterSpec:
    """Filter parameters for a filtered graph query.

    Traversal shape: ``center_node`` (case-insensitive substring of name or
    title) with a ``depth`` hop bound. When ``center_node`` is set the
    attribute fields are ignored.

    Attribute shape: ``node_types``, ``node_names`` and
    ``relationship_types``; each empty field matches everything.

    The depth is passed through unclamped; bounding it is caller policy.
    """

    center_node: str | None = None
    depth: int = 1
    node_types: tuple[str, ...] = ()
    node_names: tuple[str, ...] = ()
    relationship_types: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("node_types", "node_names", "relationship_types"):
            object.__setattr__(self, name, _clean_terms(getattr(self, name)))

    @property
    def is_traversal(self) -> bool:
        return bool(self.center_node)


def _clean_terms(values: Iterable[str] | None) -> tuple[str, ...]:
    if not values:
        return ()
    if isinstance(values, str):
        values = [values]
    return tuple(dict.fromkeys(value for value in values if value))


class GraphQueryRequest(BaseModel):
    """Tool arguments for the graph query tool.

    Accepts the camelCase argument names used by the tool schema. Depth is
    clamped into the configured [graph_min_depth, graph_max_depth] range
    rather than rejected.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    center_node: str | None = Field(
        default=None,
        alias="centerNode",
        description="Name or title fragment of the node to center the traversal on",
    )
    depth: int | None = Field(
        default=None,
        validate_default=True,
        description="Traversal hop bound around the center node",
    )
    node_types: list[str] = Field(
        default_factory=list,
        alias="nodeTypes",
        description="Allowed node type tags (e.g. Character, Location)",
    )
    node_names: list[str] = Field(
        default_factory=list,
        alias="nodeNames",
        description="Name or title fragments to match",
    )
    relationship_types: list[str] = Field(
        default_factory=list,
        alias="relationshipTypes",
        description="Allowed relationship type tags",
    )

    @field_validator("center_node")
    @classmethod
    def strip_center_node(cls, v: str | None) -> str | None:
        """Treat blank center nodes as absent."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("depth")
    @classmethod
    def clamp_depth(cls, v: int | None) -> int:
        settings = get_settings()
        if v is None:
            v = settings.graph_default_depth
        return max(settings.graph_min_depth, min(settings.graph_max_depth, v))

    def to_filter_spec(self) -> FilterSpec:
        return FilterSpec(
            center_node=self.center_node,
            depth=self.depth or get_settings().graph_default_depth,
            node_types=tuple(self.node_types),
            node_names=tuple(self.node_names),
            relationship_types=tuple(self.relationship_types),
        )
