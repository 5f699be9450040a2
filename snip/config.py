"""Configuration management for the link service."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration."""

    # Store settings
    store_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Link store backend: 'memory' (single process) or 'postgres'"
    )

    database_url: str = Field(
        default="postgresql://postgres@localhost:5432/snip",
        description="PostgreSQL connection URL (postgres backend only)"
    )

    create_tables: bool = Field(
        default=False,
        description="Create the links table on first connection"
    )

    store_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Per-call timeout for store operations"
    )

    pool_max_size: int = Field(
        default=10,
        ge=1,
        description="Maximum PostgreSQL connection pool size"
    )

    # Redis settings (optional)
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for the resolve cache"
    )

    cache_ttl_seconds: int = Field(
        default=3600,
        description="Cache TTL in seconds"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=9200,
        description="Port to listen on"
    )

    workers: int = Field(
        default=1,
        ge=1,
        description="Number of uvicorn worker processes. Use >1 only with the postgres backend."
    )

    debug: bool = Field(
        default=False,
        description="Include internal error details in 500 responses"
    )

    # Link settings
    base_url: str = Field(
        default="http://localhost:9200",
        description="Base URL for generating short URLs"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short URLs (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=7,
        ge=2,
        le=30,
        description="Default length for generated short codes"
    )

    click_event_limit: int = Field(
        default=1000,
        ge=1,
        description="Click events kept per link (oldest dropped first)"
    )

    enable_custom_codes: bool = Field(
        default=True,
        description="Allow users to provide custom short codes"
    )

    max_collision_retries: int = Field(
        default=10,
        ge=1,
        description="Maximum attempts when generating an unused short code"
    )

    owner_header: str = Field(
        default="X-Owner-Id",
        description="Request header carrying the caller identity set by the auth proxy"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
