"""
Configuration module for graph-explorer.

Uses pydantic-settings for environment-based configuration. The Neo4j
connection defaults exist for local development only and must be
overridden in any shared environment.
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Connection settings map to NEO4J_URI, NEO4J_USER, NEO4J_PASSWORD and
    NEO4J_DATABASE. The graph_*_depth values are the caller-side policy
    applied to tool input before it reaches the query engine.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # NEO4J CONFIGURATION
    # ===========================================
    neo4j_uri: str = Field(
        default="bolt://localhost:7687",
        description="Neo4j Bolt protocol URI",
    )
    neo4j_user: str = Field(default="neo4j", description="Neo4j username")
    neo4j_password: str = Field(
        default="password123",
        description="Neo4j password (development default)",
    )
    neo4j_database: str = Field(
        default="neo4j",
        description="Neo4j database name",
    )

    # ===========================================
    # TRAVERSAL POLICY (tool layer)
    # ===========================================
    graph_min_depth: int = Field(default=1, ge=1, description="Smallest accepted hop bound")
    graph_max_depth: int = Field(default=3, ge=1, description="Largest accepted hop bound")
    graph_default_depth: int = Field(
        default=2,
        ge=1,
        description="Hop bound used when the caller gives none",
    )

    @model_validator(mode="after")
    def check_depth_policy(self) -> "Settings":
        """Reject an inverted hop range or a default outside it."""
        if self.graph_min_depth > self.graph_max_depth:
            msg = (
                f"graph_min_depth ({self.graph_min_depth}) must not exceed "
                f"graph_max_depth ({self.graph_max_depth})"
            )
            raise ValueError(msg)
        if not self.graph_min_depth <= self.graph_default_depth <= self.graph_max_depth:
            msg = (
                f"graph_default_depth ({self.graph_default_depth}) must lie within "
                f"[{self.graph_min_depth}, {self.graph_max_depth}]"
            )
            raise ValueError(msg)
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
