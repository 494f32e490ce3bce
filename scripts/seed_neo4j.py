#!/usr/bin/env python3
"""
Seed Neo4j with the Middle-earth sample knowledge graph.

Seeds the graph database with:
- Character, Location, Race, Item and Event nodes
- Relationships between them (LIVES_IN, MEMBER_OF, CARRIES, ...)

Development helper only; the query engine itself never writes.

Usage:
    python scripts/seed_neo4j.py              # Clear and seed sample data
    python scripts/seed_neo4j.py --no-clear   # Seed on top of existing data
    python scripts/seed_neo4j.py --json /path/to/graph.json

JSON format:
    {"nodes": [{"key": "frodo", "type": "Character", "properties": {...}}],
     "relationships": [{"from": "frodo", "to": "shire", "type": "LIVES_IN",
                        "properties": {...}}]}

Environment Variables:
    NEO4J_URI: Neo4j connection URI (default: bolt://localhost:7687)
    NEO4J_USER: Neo4j username (default: neo4j)
    NEO4J_PASSWORD: Neo4j password (default: password123)
"""

import argparse
import asyncio
import json
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Repository root on the path for `src.*` imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from neo4j import AsyncGraphDatabase
from neo4j.exceptions import ServiceUnavailable

from src.core.config import get_settings

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class NodeData:
    """Node seed data. ``key`` is a seed-only identifier stored as a property."""
    key: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class RelationshipData:
    """Relationship seed data between two node keys."""
    source: str
    target: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Sample Data
# =============================================================================

SAMPLE_NODES = [
    NodeData("frodo", "Character", {"name": "Frodo Baggins", "title": "Ring-bearer"}),
    NodeData("sam", "Character", {"name": "Samwise Gamgee"}),
    NodeData("gandalf", "Character", {"name": "Gandalf", "title": "The Grey"}),
    NodeData("aragorn", "Character", {"name": "Aragorn", "title": "King of Gondor"}),
    NodeData("legolas", "Character", {"name": "Legolas"}),
    NodeData("gollum", "Character", {"name": "Gollum"}),
    NodeData("shire", "Location", {"name": "Shire", "region": "Eriador"}),
    NodeData("rivendell", "Location", {"name": "Rivendell", "region": "Eriador"}),
    NodeData("mordor", "Location", {"name": "Mordor"}),
    NodeData("mirkwood", "Location", {"name": "Mirkwood", "region": "Rhovanion"}),
    NodeData("hobbit", "Race", {"name": "Hobbit"}),
    NodeData("elf", "Race", {"name": "Elf"}),
    NodeData("man", "Race", {"name": "Man"}),
    NodeData("maia", "Race", {"name": "Maia"}),
    NodeData("one_ring", "Item", {"name": "The One Ring", "forged_by": "Sauron"}),
    NodeData("sting", "Item", {"name": "Sting", "kind": "sword"}),
    NodeData("council", "Event", {"title": "Council of Elrond", "year": 3018}),
    NodeData("destruction", "Event", {"title": "Destruction of the Ring", "year": 3019}),
]

SAMPLE_RELATIONSHIPS = [
    RelationshipData("frodo", "shire", "LIVES_IN"),
    RelationshipData("sam", "shire", "LIVES_IN"),
    RelationshipData("legolas", "mirkwood", "LIVES_IN"),
    RelationshipData("frodo", "hobbit", "MEMBER_OF"),
    RelationshipData("sam", "hobbit", "MEMBER_OF"),
    RelationshipData("gollum", "hobbit", "MEMBER_OF", {"formerly": True}),
    RelationshipData("legolas", "elf", "MEMBER_OF"),
    RelationshipData("aragorn", "man", "MEMBER_OF"),
    RelationshipData("gandalf", "maia", "MEMBER_OF"),
    RelationshipData("frodo", "one_ring", "CARRIES"),
    RelationshipData("frodo", "sting", "CARRIES"),
    RelationshipData("sam", "frodo", "FRIEND_OF"),
    RelationshipData("gandalf", "frodo", "MENTORS"),
    RelationshipData("frodo", "council", "ATTENDED"),
    RelationshipData("gandalf", "council", "ATTENDED"),
    RelationshipData("aragorn", "council", "ATTENDED"),
    RelationshipData("legolas", "council", "ATTENDED"),
    RelationshipData("council", "rivendell", "TOOK_PLACE_IN"),
    RelationshipData("destruction", "mordor", "TOOK_PLACE_IN"),
    RelationshipData("frodo", "destruction", "PARTICIPATED_IN"),
    RelationshipData("sam", "destruction", "PARTICIPATED_IN"),
    RelationshipData("gollum", "destruction", "PARTICIPATED_IN"),
]


# =============================================================================
# Seeding Functions
# =============================================================================

def _check_identifier(value: str) -> str:
    """Labels and relationship types cannot be parameters; only plain identifiers pass."""
    if not _IDENTIFIER.match(value):
        raise ValueError(f"Invalid label or relationship type: {value!r}")
    return value


async def clear_database(driver) -> None:
    """Delete all nodes and relationships."""
    async with driver.session() as session:
        await session.run("MATCH (n) DETACH DELETE n")
    print("✓ Cleared existing data")


async def create_nodes(driver, nodes: list[NodeData]) -> None:
    """Create nodes grouped by type."""
    async with driver.session() as session:
        for node in nodes:
            label = _check_identifier(node.type)
            await session.run(
                f"MERGE (n:{label} {{seed_key: $key}}) SET n += $props",
                key=node.key,
                props=node.properties,
            )
    print(f"✓ Created {len(nodes)} nodes")


async def create_relationships(driver, relationships: list[RelationshipData]) -> None:
    """Create relationships between seeded nodes."""
    async with driver.session() as session:
        for rel in relationships:
            rel_type = _check_identifier(rel.type)
            await session.run(
                f"""
                MATCH (a {{seed_key: $source}})
                MATCH (b {{seed_key: $target}})
                MERGE (a)-[r:{rel_type}]->(b)
                SET r += $props
                """,
                source=rel.source,
                target=rel.target,
                props=rel.properties,
            )
    print(f"✓ Created {len(relationships)} relationships")


async def print_summary(driver) -> None:
    """Print summary of seeded data."""
    async with driver.session() as session:
        result = await session.run(
            "MATCH (n) RETURN labels(n)[0] AS label, count(n) AS count ORDER BY label"
        )
        node_counts = [(record["label"], record["count"]) async for record in result]

        result = await session.run(
            "MATCH ()-[r]->() RETURN type(r) AS type, count(r) AS count ORDER BY count DESC"
        )
        rel_counts = [(record["type"], record["count"]) async for record in result]

    print("\n" + "=" * 50)
    print("SEEDING SUMMARY")
    print("=" * 50)
    print("Nodes:")
    for label, count in node_counts:
        print(f"  {label}: {count}")
    print("\nRelationships:")
    for rel_type, count in rel_counts:
        print(f"  {rel_type}: {count}")
    print("=" * 50)


# =============================================================================
# Data Loading Functions
# =============================================================================

def load_graph_from_json(json_path: Path) -> tuple[list[NodeData], list[RelationshipData]]:
    """Load nodes and relationships from a JSON file."""
    with open(json_path, "r") as f:
        data = json.load(f)

    nodes = [
        NodeData(
            key=n_data["key"],
            type=n_data["type"],
            properties=n_data.get("properties", {}),
        )
        for n_data in data.get("nodes", [])
    ]
    relationships = [
        RelationshipData(
            source=r_data["from"],
            target=r_data["to"],
            type=r_data["type"],
            properties=r_data.get("properties", {}),
        )
        for r_data in data.get("relationships", [])
    ]
    return nodes, relationships


# =============================================================================
# Main Entry Point
# =============================================================================

async def seed_database(
    nodes: list[NodeData],
    relationships: list[RelationshipData],
    clear: bool = True,
) -> None:
    """Seed the Neo4j database with graph data."""
    settings = get_settings()
    print(f"\nConnecting to Neo4j at {settings.neo4j_uri}...")

    driver = AsyncGraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
    )

    try:
        await driver.verify_connectivity()
        print("✓ Connected to Neo4j")

        if clear:
            await clear_database(driver)

        await create_nodes(driver, nodes)
        await create_relationships(driver, relationships)
        await print_summary(driver)

        print("\n✓ Seeding complete!")

    except ServiceUnavailable as e:
        print(f"\n✗ Failed to connect to Neo4j: {e}")
        print("  Make sure Neo4j is running on", settings.neo4j_uri)
        sys.exit(1)
    finally:
        await driver.close()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed Neo4j with the sample knowledge graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--json",
        type=Path,
        help="Path to a graph JSON file (defaults to the built-in sample)",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Don't clear existing data before seeding",
    )

    args = parser.parse_args()

    if args.json:
        if not args.json.exists():
            print(f"✗ JSON file not found: {args.json}")
            sys.exit(1)
        nodes, relationships = load_graph_from_json(args.json)
        print(f"Loaded graph from {args.json}")
    else:
        nodes, relationships = SAMPLE_NODES, SAMPLE_RELATIONSHIPS
        print("Using sample data...")

    asyncio.run(seed_database(nodes, relationships, clear=not args.no_clear))


if __name__ == "__main__":
    main()
