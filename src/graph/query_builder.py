"""
Cypher generation for graph projection queries.

Two strategies for filtered queries:
- Traversal: center-node match plus a bounded variable-length expansion
- Attribute: type/name filtered node scan plus an outgoing-relationship
  expansion, closed over the matched node set by the assembler

Every caller-supplied string or list is sent as a bound parameter. The
only interpolated value is the integer hop bound, which Cypher does not
accept as a parameter inside a variable-length pattern.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.graph.models import FilterSpec

# =============================================================================
# Fixed Queries
# =============================================================================

FETCH_ALL_CYPHER = """
MATCH (n)
OPTIONAL MATCH (n)-[r]->(m)
RETURN n, r, m
"""

NODE_LABELS_CYPHER = "CALL db.labels() YIELD label RETURN label"

RELATIONSHIP_TYPES_CYPHER = (
    "CALL db.relationshipTypes() YIELD relationshipType RETURN relationshipType"
)


@dataclass(frozen=True)
class BuiltQuery:
    """A parameterized query and how its result must be assembled.

    Attributes:
        cypher: Query text
        parameters: Bound parameters referenced by the query text
        close_edges: Whether the assembler must drop edges with an
            endpoint outside the returned node set
    """

    cypher: str
    parameters: dict[str, Any] = field(default_factory=dict)
    close_edges: bool = False


# =============================================================================
# Predicate Helpers
# =============================================================================


def _contains_ci(variable: str, prop: str, needle: str) -> str:
    """Case-insensitive substring test on a possibly missing property."""
    return f"toLower(coalesce(toStringOrNull({variable}.{prop}), '')) CONTAINS toLower({needle})"


def _name_or_title_contains(variable: str, needle: str) -> str:
    return (
        f"({_contains_ci(variable, 'name', needle)} "
        f"OR {_contains_ci(variable, 'title', needle)})"
    )


def normalize_depth(depth: Any) -> int:
    """Hop bound for the traversal pattern; non-positive values become 1."""
    depth = int(depth)
    return depth if depth > 0 else 1


# =============================================================================
# Builders
# =============================================================================


def build_traversal_query(center_node: str, depth: int) -> BuiltQuery:
    """Center-node traversal up to ``depth`` hops in either direction.

    Returns one row per matched center: the center, the distinct nodes
    touched by any matched path and the distinct relationships traversed.
    A center without paths comes back alone with two empty lists.
    """
    hops = normalize_depth(depth)
    # UNWIND of an empty list drops the row, so a pathless center unwinds [null]
    cypher = f"""
MATCH (center)
WHERE {_name_or_title_contains('center', '$center_node')}
OPTIONAL MATCH path = (center)-[*1..{hops}]-()
WITH center, collect(path) AS paths
UNWIND (CASE paths WHEN [] THEN [null] ELSE paths END) AS p
UNWIND coalesce(nodes(p), [null]) AS node
WITH center, paths, collect(DISTINCT node) AS path_nodes
UNWIND (CASE paths WHEN [] THEN [null] ELSE paths END) AS p
UNWIND coalesce(relationships(p), [null]) AS rel
RETURN center, path_nodes, collect(DISTINCT rel) AS path_relationships
"""
    return BuiltQuery(
        cypher=cypher,
        parameters={"center_node": center_node},
        close_edges=False,
    )


def build_attribute_query(
    node_types: tuple[str, ...] = (),
    node_names: tuple[str, ...] = (),
    relationship_types: tuple[str, ...] = (),
) -> BuiltQuery:
    """Filtered node scan with outgoing relationships.

    Each empty filter drops its clause and parameter. Relationships may
    point at nodes the scan excluded, so the result must be closed.
    """
    parameters: dict[str, Any] = {}
    node_clauses: list[str] = []

    if node_types:
        node_clauses.append("any(tag IN labels(n) WHERE tag IN $node_types)")
        parameters["node_types"] = list(node_types)
    if node_names:
        node_clauses.append(
            f"any(term IN $node_names WHERE {_name_or_title_contains('n', 'term')})"
        )
        parameters["node_names"] = list(node_names)

    lines = ["MATCH (n)"]
    if node_clauses:
        lines.append("WHERE " + "\n  AND ".join(node_clauses))
    lines.append("OPTIONAL MATCH (n)-[r]->()")
    if relationship_types:
        lines.append("WHERE type(r) IN $relationship_types")
        parameters["relationship_types"] = list(relationship_types)
    lines.append("RETURN n, r")

    return BuiltQuery(
        cypher="\n".join(lines),
        parameters=parameters,
        close_edges=True,
    )


def build_query(spec: FilterSpec) -> BuiltQuery:
    """Pick the strategy for ``spec`` and build its query.

    A non-empty center node selects the traversal strategy and the
    attribute filters are ignored.
    """
    if spec.is_traversal:
        assert spec.center_node is not None  # For type checker
        return build_traversal_query(spec.center_node, spec.depth)
    return build_attribute_query(
        node_types=spec.node_types,
        node_names=spec.node_names,
        relationship_types=spec.relationship_types,
    )
