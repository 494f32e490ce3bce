# Graph module for Neo4j integration
"""
Graph layer for Neo4j projection queries including:
- Neo4jClient: Owned connection provider with scoped sessions
- GraphQueryEngine: fetch-all, raw, filtered and schema operations
- Element normalizer and result assembler producing GraphData
- Query builder for traversal and attribute-filtered queries
"""

from src.graph.assembler import GraphAssembler, assemble
from src.graph.elements import decode_value, derive_label, normalize
from src.graph.engine import GraphQueryEngine
from src.graph.exceptions import (
    Neo4jConnectionError,
    Neo4jError,
    Neo4jQueryError,
)
from src.graph.models import (
    FilterSpec,
    GraphData,
    GraphEdge,
    GraphNode,
    GraphQueryRequest,
    GraphSchema,
)
from src.graph.neo4j_client import (
    FakeNeo4jClient,
    Neo4jClient,
    Neo4jClientProtocol,
)
from src.graph.query_builder import BuiltQuery, build_query

__all__ = [
    # Exceptions
    "Neo4jError",
    "Neo4jConnectionError",
    "Neo4jQueryError",
    # Client
    "Neo4jClient",
    "Neo4jClientProtocol",
    "FakeNeo4jClient",
    # Models
    "FilterSpec",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "GraphQueryRequest",
    "GraphSchema",
    # Pipeline
    "BuiltQuery",
    "GraphAssembler",
    "GraphQueryEngine",
    "assemble",
    "build_query",
    "decode_value",
    "derive_label",
    "normalize",
]
