"""
Neo4j client module implementing the connection provider.

Design follows:
- Owned resource: the client is constructed once and injected into the
  query engine; there is no module-level driver
- Lazy driver: created on first use, rebuilt transparently after close()
- Scoped sessions: every query opens its own session and closes it on
  every exit path
- Custom exceptions: Neo4jConnectionError / Neo4jQueryError

This module provides:
- Neo4jClient: Real client for production use
- FakeNeo4jClient: In-memory fake for testing
- Both share the same interface (duck typing)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from neo4j import AsyncGraphDatabase
from neo4j.exceptions import AuthError, ClientError, ServiceUnavailable

from src.graph.exceptions import Neo4jConnectionError, Neo4jQueryError

if TYPE_CHECKING:
    from neo4j import AsyncDriver

logger = logging.getLogger(__name__)


@runtime_checkable
class Neo4jClientProtocol(Protocol):
    """Protocol defining the Neo4jClient interface.

    Any class implementing these methods can back a GraphQueryEngine.
    """

    async def query_rows(
        self,
        cypher: str,
        parameters: dict[str, Any] | None = None,
    ) -> list[list[Any]]:
        """Execute a read query and return raw row values."""
        ...

    async def close(self) -> None:
        """Release the connection."""
        ...


class Neo4jClient:
    """Neo4j client owning a single, lazily created async driver.

    The driver is shared by all concurrent operations; sessions are not.

    Usage:
        # As async context manager
        async with Neo4jClient(settings=settings) as client:
            rows = await client.query_rows("MATCH (n) RETURN n LIMIT 10")

        # Lazy use: the first query connects, close() releases
        client = Neo4jClient(settings=settings)
        rows = await client.query_rows("MATCH (n) RETURN n")
        await client.close()
    """

    def __init__(self, settings: Any) -> None:
        """Initialize client with Settings object.

        Args:
            settings: Settings object with neo4j_uri, neo4j_user,
                      neo4j_password, neo4j_database attributes

        Note:
            Driver is NOT created here. The first acquire() builds it.
        """
        self._settings = settings
        self._uri = settings.neo4j_uri
        self._user = settings.neo4j_user
        self._password = settings.neo4j_password
        self._database = settings.neo4j_database
        self._driver: AsyncDriver | None = None
        self._lock = asyncio.Lock()

    @property
    def uri(self) -> str:
        """Get the connection URI."""
        return self._uri

    @property
    def database(self) -> str:
        """Get the database name."""
        return self._database

    @property
    def is_connected(self) -> bool:
        """Check if driver is initialized."""
        return self._driver is not None

    async def connect(self) -> None:
        """Create driver and verify connectivity.

        No-op when a driver is already held. A driver that fails
        verification is closed before the error is raised.

        Raises:
            Neo4jConnectionError: If the store is unreachable or rejects
                the credentials.
        """
        if self._driver is not None:
            return
        logger.debug("Connecting to Neo4j at %s", self._uri)
        driver: AsyncDriver | None = None
        try:
            driver = AsyncGraphDatabase.driver(
                self._uri,
                auth=(self._user, self._password),
            )
            await driver.verify_connectivity()
        except ServiceUnavailable as e:
            await self._discard(driver)
            raise Neo4jConnectionError(
                f"Failed to connect to Neo4j at {self._uri}",
                cause=e,
            ) from e
        except AuthError as e:
            await self._discard(driver)
            raise Neo4jConnectionError(
                f"Neo4j rejected credentials for user {self._user}",
                cause=e,
            ) from e
        except Exception as e:
            await self._discard(driver)
            raise Neo4jConnectionError(
                f"Unexpected error connecting to Neo4j: {e}",
                cause=e,
            ) from e
        self._driver = driver
        logger.info("Connected to Neo4j at %s", self._uri)

    async def _discard(self, driver: AsyncDriver | None) -> None:
        """Close a driver that never became the shared one."""
        if driver is None:
            return
        try:
            await driver.close()
        except Exception:
            logger.warning("Failed to close unverified Neo4j driver", exc_info=True)

    async def acquire(self) -> AsyncDriver:
        """Return the shared driver, creating it on first use.

        Raises:
            Neo4jConnectionError: If a new driver cannot connect.
        """
        async with self._lock:
            if self._driver is None:
                await self.connect()
            assert self._driver is not None  # For type checker
            return self._driver

    async def close(self) -> None:
        """Close the driver connection.

        Safe to call even if not connected (no-op). A later acquire()
        builds a fresh driver.
        """
        async with self._lock:
            if self._driver is not None:
                driver, self._driver = self._driver, None
                await driver.close()
                logger.info("Closed Neo4j driver for %s", self._uri)

    async def __aenter__(self) -> Neo4jClient:
        """Async context manager entry - connect to Neo4j."""
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - close connection."""
        await self.close()

    async def query_rows(
        self,
        cypher: str,
        parameters: dict[str, Any] | None = None,
    ) -> list[list[Any]]:
        """Execute a read query in its own session.

        Args:
            cypher: Cypher query string
            parameters: Optional bound query parameters

        Returns:
            One list of column values per record, in store order. Graph
            values are left as driver objects for the element normalizer.

        Raises:
            Neo4jConnectionError: If the driver cannot be acquired
            Neo4jQueryError: If query execution fails
        """
        driver = await self.acquire()

        try:
            async with driver.session(database=self._database) as session:
                result = await session.run(cypher, parameters or {})
                return await result.values()
        except ClientError as e:
            raise Neo4jQueryError(
                f"Query failed: {e}",
                query=cypher,
                cause=e,
            ) from e
        except Exception as e:
            raise Neo4jQueryError(
                f"Unexpected error executing query: {e}",
                query=cypher,
                cause=e,
            ) from e


class FakeNeo4jClient:
    """In-memory fake Neo4j client for testing.

    Implements the same interface as Neo4jClient. Rows are configured
    up front, either for every query or for queries containing a given
    text fragment; executed queries are recorded for assertions.

    Usage:
        fake = FakeNeo4jClient()
        fake.set_query_results([[node_a, rel, node_b]])
        fake.set_results_for("db.labels()", [["Character"], ["Location"]])
        engine = GraphQueryEngine(client=fake)
    """

    def __init__(self) -> None:
        """Initialize fake client with no configured results."""
        self._connected = False
        self._query_results: list[list[Any]] = []
        self._results_by_fragment: dict[str, list[list[Any]]] = {}
        self._error: Exception | None = None
        self.executed: list[tuple[str, dict[str, Any]]] = []
        self.close_count = 0

    @property
    def is_connected(self) -> bool:
        """Check if fake is 'connected'."""
        return self._connected

    async def connect(self) -> None:
        """Simulate connecting (always succeeds)."""
        await asyncio.sleep(0)  # Yield to event loop for true async
        self._connected = True

    async def close(self) -> None:
        """Simulate closing connection."""
        await asyncio.sleep(0)  # Yield to event loop for true async
        self._connected = False
        self.close_count += 1

    async def __aenter__(self) -> FakeNeo4jClient:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def query_rows(
        self,
        cypher: str,
        parameters: dict[str, Any] | None = None,
    ) -> list[list[Any]]:
        """Return the configured rows for this query.

        Connects lazily like the real client. Fragment-specific results
        take precedence over the default results.
        """
        await asyncio.sleep(0)  # Yield to event loop for true async
        self._connected = True
        self.executed.append((cypher, dict(parameters or {})))

        if self._error is not None:
            raise Neo4jQueryError(
                f"Query failed: {self._error}",
                query=cypher,
                cause=self._error,
            ) from self._error

        for fragment, rows in self._results_by_fragment.items():
            if fragment in cypher:
                return [list(row) for row in rows]
        return [list(row) for row in self._query_results]

    def set_query_results(self, rows: list[list[Any]]) -> None:
        """Configure rows returned for any query without a fragment match."""
        self._query_results = rows

    def set_results_for(self, fragment: str, rows: list[list[Any]]) -> None:
        """Configure rows returned for queries containing ``fragment``."""
        self._results_by_fragment[fragment] = rows

    def set_error(self, error: Exception | None) -> None:
        """Make every subsequent query fail with ``error`` as the cause."""
        self._error = error

    def clear(self) -> None:
        """Clear configured results and recorded queries."""
        self._query_results = []
        self._results_by_fragment.clear()
        self._error = None
        self.executed.clear()
