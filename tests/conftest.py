"""
Pytest configuration and fixtures for graph-explorer tests.
"""

import pytest

from src.core.config import Settings, get_settings
from src.graph.engine import GraphQueryEngine
from src.graph.neo4j_client import FakeNeo4jClient


@pytest.fixture
def settings() -> Settings:
    """Provide test settings."""
    return Settings(
        neo4j_uri="bolt://localhost:7687",
        neo4j_user="neo4j",
        neo4j_password="testpassword",
        neo4j_database="neo4j",
    )


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Keep cached settings from leaking environment changes between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_client() -> FakeNeo4jClient:
    """In-memory Neo4j client double."""
    return FakeNeo4jClient()


@pytest.fixture
def engine(fake_client: FakeNeo4jClient) -> GraphQueryEngine:
    """Query engine backed by the fake client."""
    return GraphQueryEngine(client=fake_client)
