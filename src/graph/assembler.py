"""
Result assembler: raw result rows -> deduplicated GraphData.

The first observation of an element id wins; later sightings of the same id
are dropped without merging their properties. Rows are consumed in the
order the store returns them and no secondary sort is applied, so when the
store's order is nondeterministic the kept snapshot is too.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from src.graph.elements import decode_value, normalize
from src.graph.models import GraphData, GraphEdge, GraphNode


class GraphAssembler:
    """Accumulates nodes and edges keyed by element id.

    Usage:
        assembler = GraphAssembler()
        for row in rows:
            assembler.add_row(row)
        graph = assembler.build(close_edges=True)
    """

    def __init__(self) -> None:
        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}

    def add_row(self, row: Iterable[Any]) -> None:
        """Normalize every column value of one result row."""
        for raw in row:
            for element in normalize(decode_value(raw)):
                self.add_element(element)

    def add_element(self, element: GraphNode | GraphEdge) -> None:
        if isinstance(element, GraphNode):
            self._nodes.setdefault(element.id, element)
        else:
            self._edges.setdefault(element.id, element)

    def build(self, close_edges: bool = False) -> GraphData:
        """Produce the projection.

        Args:
            close_edges: Keep only edges whose both endpoints are among
                the accumulated nodes.
        """
        edges = list(self._edges.values())
        if close_edges:
            edges = [
                edge
                for edge in edges
                if edge.from_id in self._nodes and edge.to_id in self._nodes
            ]
        return GraphData(nodes=list(self._nodes.values()), edges=edges)


def assemble(rows: Iterable[Iterable[Any]], close_edges: bool = False) -> GraphData:
    """Assemble result rows into a deduplicated GraphData."""
    assembler = GraphAssembler()
    for row in rows:
        assembler.add_row(row)
    return assembler.build(close_edges=close_edges)
