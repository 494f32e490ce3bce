#!/usr/bin/env python3
"""
Query the knowledge graph from the command line.

Runs one engine operation and prints the renderer payload as JSON.

Usage:
    python scripts/query_graph.py all
    python scripts/query_graph.py filter --center Frodo --depth 2
    python scripts/query_graph.py filter --type Location --rel-type LIVES_IN
    python scripts/query_graph.py filter --name shire --name bag
    python scripts/query_graph.py raw "MATCH (n:Item) RETURN n"
    python scripts/query_graph.py schema

Environment Variables:
    NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD, NEO4J_DATABASE
    GRAPH_EXPLORER_LOG_LEVEL
"""

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path
from typing import Any

# Repository root on the path for `src.*` imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.config import get_settings
from src.core.logging import set_correlation_id, setup_structured_logging
from src.graph.engine import GraphQueryEngine
from src.graph.exceptions import Neo4jError
from src.graph.models import GraphQueryRequest
from src.graph.neo4j_client import Neo4jClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Query the knowledge graph and print the projection as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("all", help="Fetch every node and relationship")

    filter_parser = subparsers.add_parser("filter", help="Run a filtered query")
    filter_parser.add_argument("--center", help="Name/title fragment to center on")
    filter_parser.add_argument("--depth", type=int, help="Hop bound (clamped to 1-3)")
    filter_parser.add_argument(
        "--type", dest="node_types", action="append", default=[], help="Node type tag"
    )
    filter_parser.add_argument(
        "--name", dest="node_names", action="append", default=[], help="Name/title fragment"
    )
    filter_parser.add_argument(
        "--rel-type",
        dest="relationship_types",
        action="append",
        default=[],
        help="Relationship type tag",
    )

    raw_parser = subparsers.add_parser("raw", help="Run raw Cypher (operator use only)")
    raw_parser.add_argument("cypher", help="Cypher query text")

    subparsers.add_parser("schema", help="List node labels and relationship types")

    return parser


async def run_command(engine: GraphQueryEngine, args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "all":
        graph = await engine.fetch_all()
    elif args.command == "filter":
        request = GraphQueryRequest(
            center_node=args.center,
            depth=args.depth,
            node_types=args.node_types,
            node_names=args.node_names,
            relationship_types=args.relationship_types,
        )
        graph = await engine.run_filtered(request.to_filter_spec())
    elif args.command == "raw":
        graph = await engine.run_raw(args.cypher)
    else:
        schema = await engine.schema()
        return {
            "nodeLabels": sorted(schema.node_labels),
            "relationshipTypes": sorted(schema.relationship_types),
        }

    print(graph.summary(), file=sys.stderr)
    return graph.to_dict()


async def main_async(args: argparse.Namespace) -> int:
    engine = GraphQueryEngine(client=Neo4jClient(settings=get_settings()))
    try:
        payload = await run_command(engine, args)
    except (Neo4jError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    finally:
        await engine.close()

    print(json.dumps(payload, indent=2, default=str))
    return 0


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()
    setup_structured_logging()
    set_correlation_id(uuid.uuid4().hex)
    sys.exit(asyncio.run(main_async(args)))


if __name__ == "__main__":
    main()
