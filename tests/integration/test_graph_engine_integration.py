"""
Integration tests for GraphQueryEngine against a live Neo4j.

These tests WIPE the configured database before each test. Run them only
against a disposable instance:

    NEO4J_INTEGRATION=1 NEO4J_URI=bolt://localhost:7687 pytest tests/integration
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from neo4j import AsyncGraphDatabase

from src.core.config import Settings
from src.graph.engine import GraphQueryEngine
from src.graph.models import FilterSpec
from src.graph.neo4j_client import Neo4jClient
from src.graph.query_builder import build_traversal_query

pytestmark = pytest.mark.skipif(
    os.environ.get("NEO4J_INTEGRATION") != "1",
    reason="Set NEO4J_INTEGRATION=1 to run against a disposable Neo4j",
)

SHIRE_FIXTURE = """
CREATE (a:Character {name: 'Frodo'})
CREATE (b:Location {name: 'Shire'})
CREATE (a)-[:LIVES_IN]->(b)
"""

# Chain used for depth checks: Frodo - Sam - Rosie - Elanor, plus Bag End off Frodo
CHAIN_FIXTURE = """
CREATE (f:Character {name: 'Frodo'})
CREATE (s:Character {name: 'Samwise'})
CREATE (r:Character {name: 'Rosie'})
CREATE (e:Character {name: 'Elanor'})
CREATE (h:Location {title: 'Bag End'})
CREATE (s)-[:FRIEND_OF]->(f)
CREATE (s)-[:MARRIED_TO]->(r)
CREATE (e)-[:CHILD_OF]->(r)
CREATE (f)-[:LIVES_IN]->(h)
"""


async def _reset(settings: Settings, fixture: str) -> None:
    driver = AsyncGraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
    )
    try:
        async with driver.session(database=settings.neo4j_database) as session:
            await session.run("MATCH (n) DETACH DELETE n")
            await session.run(fixture)
    finally:
        await driver.close()


@pytest_asyncio.fixture
async def live_engine() -> AsyncIterator[GraphQueryEngine]:
    engine = GraphQueryEngine(client=Neo4jClient(settings=Settings()))
    yield engine
    await engine.close()


class TestShireScenario:
    """Frodo lives in the Shire."""

    @pytest.mark.asyncio
    async def test_traversal_returns_both_ends(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), SHIRE_FIXTURE)

        graph = await live_engine.run_filtered(FilterSpec(center_node="frodo", depth=1))

        assert sorted(n.label for n in graph.nodes) == ["Frodo", "Shire"]
        assert [e.label for e in graph.edges] == ["LIVES_IN"]

    @pytest.mark.asyncio
    async def test_type_filter_drops_dangling_edge(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), SHIRE_FIXTURE)

        graph = await live_engine.run_filtered(FilterSpec(node_types=("Location",)))

        assert [n.label for n in graph.nodes] == ["Shire"]
        assert graph.edges == []

    @pytest.mark.asyncio
    async def test_schema(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), SHIRE_FIXTURE)

        schema = await live_engine.schema()

        assert {"Character", "Location"} <= schema.node_labels
        assert "LIVES_IN" in schema.relationship_types


class TestGraphProperties:
    """Properties that only a real store can demonstrate."""

    @pytest.mark.asyncio
    async def test_depth_never_shrinks_reachable_set(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), CHAIN_FIXTURE)

        counts = []
        for depth in (1, 2, 3):
            graph = await live_engine.run_filtered(FilterSpec(center_node="Frodo", depth=depth))
            counts.append(len(graph.nodes))

        assert counts == sorted(counts)
        assert counts == [3, 4, 5]

    @pytest.mark.asyncio
    async def test_empty_filter_matches_fetch_all(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), CHAIN_FIXTURE)

        filtered = await live_engine.run_filtered(FilterSpec())
        everything = await live_engine.fetch_all()

        assert filtered.node_ids == everything.node_ids
        assert filtered.edge_ids == everything.edge_ids

    @pytest.mark.asyncio
    async def test_name_filter_matches_title(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), CHAIN_FIXTURE)

        graph = await live_engine.run_filtered(FilterSpec(node_names=("BAG",)))

        assert [n.label for n in graph.nodes] == ["Bag End"]

    @pytest.mark.asyncio
    async def test_closed_result_after_relationship_filter(
        self, live_engine: GraphQueryEngine
    ) -> None:
        await _reset(Settings(), CHAIN_FIXTURE)

        graph = await live_engine.run_filtered(
            FilterSpec(node_types=("Character",), relationship_types=("FRIEND_OF", "LIVES_IN"))
        )

        assert [e.label for e in graph.edges] == ["FRIEND_OF"]
        for edge in graph.edges:
            assert {edge.from_id, edge.to_id} <= graph.node_ids

    @pytest.mark.asyncio
    async def test_traversal_columns_are_distinct(self) -> None:
        await _reset(Settings(), CHAIN_FIXTURE)
        built = build_traversal_query("Samwise", 3)

        async with Neo4jClient(settings=Settings()) as client:
            rows = await client.query_rows(built.cypher, built.parameters)

        assert len(rows) == 1
        _, path_nodes, path_relationships = rows[0]
        node_ids = [node.element_id for node in path_nodes]
        rel_ids = [rel.element_id for rel in path_relationships]
        assert len(node_ids) == len(set(node_ids)) == 5
        assert len(rel_ids) == len(set(rel_ids)) == 4

    @pytest.mark.asyncio
    async def test_isolated_center_comes_back_alone(self, live_engine: GraphQueryEngine) -> None:
        await _reset(Settings(), "CREATE (:Character {name: 'Tom Bombadil'})")

        graph = await live_engine.run_filtered(FilterSpec(center_node="bombadil", depth=3))

        assert [n.label for n in graph.nodes] == ["Tom Bombadil"]
        assert graph.edges == []
