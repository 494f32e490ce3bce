"""
Custom exceptions for the graph module.

Names avoid shadowing Python builtins (ConnectionError) and carry the
underlying driver exception as ``cause`` alongside normal ``from`` chaining.
"""

from __future__ import annotations


class Neo4jError(Exception):
    """Base exception for all Neo4j-related errors."""

    pass


class Neo4jConnectionError(Neo4jError):
    """Raised when the store is unreachable or rejects the credentials.

    Surfaced when the driver is acquired; never retried by the engine.
    """

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        """Initialize with message and optional cause.

        Args:
            message: Human-readable error description
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.cause = cause


class Neo4jQueryError(Neo4jError):
    """Raised when a Cypher query fails to execute.

    Covers malformed query text, parameter type mismatches, store-side
    runtime errors and connection loss during execution.
    """

    def __init__(
        self,
        message: str,
        query: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with message, failed query, and optional cause.

        Args:
            message: Human-readable error description
            query: The Cypher query that failed
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.query = query
        self.cause = cause
