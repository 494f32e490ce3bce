"""
Graph query engine: the read-only facade over the projection pipeline.

Each operation runs one query through the injected client (which scopes a
session to that query), then hands the rows to the assembler. Operations
are independent and may run concurrently against the same client.

Usage:
    client = Neo4jClient(settings=get_settings())
    engine = GraphQueryEngine(client=client)

    graph = await engine.run_filtered(FilterSpec(center_node="Frodo", depth=2))
    payload = graph.to_dict()

    await engine.close()
"""

from __future__ import annotations

import logging
from typing import Any

from src.graph.assembler import assemble
from src.graph.neo4j_client import Neo4jClientProtocol
from src.graph.models import FilterSpec, GraphData, GraphSchema
from src.graph.query_builder import (
    FETCH_ALL_CYPHER,
    NODE_LABELS_CYPHER,
    RELATIONSHIP_TYPES_CYPHER,
    build_query,
)

logger = logging.getLogger(__name__)


class GraphQueryEngine:
    """Builds, executes and assembles graph projection queries.

    The engine never writes to the store. Failures propagate unchanged
    from the client: Neo4jConnectionError when the driver cannot be
    acquired, Neo4jQueryError (with the cause attached) when execution
    fails. No retries and no partial results.
    """

    def __init__(self, client: Neo4jClientProtocol | Any) -> None:
        """Initialize engine.

        Args:
            client: Neo4j client (Neo4jClient or FakeNeo4jClient)
        """
        self._client = client

    @property
    def client(self) -> Any:
        return self._client

    async def fetch_all(self) -> GraphData:
        """Every node plus every relationship between matched pairs."""
        rows = await self._client.query_rows(FETCH_ALL_CYPHER)
        graph = assemble(rows, close_edges=False)
        logger.info("Fetched full graph: %s", graph.summary())
        return graph

    async def run_raw(self, cypher: str) -> GraphData:
        """Run caller-supplied Cypher without parameters.

        For operator/debug use only; the text is sent to the store as-is
        and must never come from untrusted input.

        Raises:
            ValueError: If the query text is blank
        """
        if not cypher or not cypher.strip():
            msg = "Raw query text must not be empty"
            raise ValueError(msg)
        logger.debug("Running raw query: %s", cypher)
        rows = await self._client.query_rows(cypher)
        graph = assemble(rows, close_edges=False)
        logger.info("Raw query returned %s", graph.summary())
        return graph

    async def run_filtered(self, spec: FilterSpec) -> GraphData:
        """Build the query for ``spec``, run it and assemble the result.

        Attribute-filtered results are closed over the matched nodes;
        traversal results are not, since every returned relationship lies
        on a matched path.
        """
        built = build_query(spec)
        logger.debug(
            "Running %s query with parameters %s",
            "traversal" if spec.is_traversal else "attribute",
            built.parameters,
        )
        rows = await self._client.query_rows(built.cypher, built.parameters)
        graph = assemble(rows, close_edges=built.close_edges)
        logger.info("Filtered query returned %s", graph.summary())
        return graph

    async def schema(self) -> GraphSchema:
        """Distinct node labels and relationship types in the store."""
        label_rows = await self._client.query_rows(NODE_LABELS_CYPHER)
        type_rows = await self._client.query_rows(RELATIONSHIP_TYPES_CYPHER)
        return GraphSchema(
            node_labels=frozenset(row[0] for row in label_rows if row),
            relationship_types=frozenset(row[0] for row in type_rows if row),
        )

    async def close(self) -> None:
        """Release the client's connection; later calls reconnect."""
        await self._client.close()
