"""Configuration management for the Replicate client.

This module centralizes environment-driven configuration for every resource
client in the package (models, predictions, streaming). It builds on
``pydantic_settings.BaseSettings`` so configuration can be provided via
environment variables, ``.env`` files, or defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover the environment variables the client reads
- Credentials are resolved lazily so a missing key fails at call time

Usage
- Construct explicitly and inject: ``config = ReplicateConfig()``
- Or share the process-wide instance: ``config = get_config()``
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MissingCredentialsError

DEFAULT_BASE_URL = "https://api.replicate.com/v1"


class ReplicateConfig(BaseSettings):
    """Configuration shared by all resource clients.

    Field names double as environment variable names (case-insensitive), so
    ``replicate_api_key`` is read from ``REPLICATE_API_KEY``.

    Notes
    - Add new shared settings here so every client inherits them.
    - Prefer reading values through the accessors below over the raw fields.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Credentials
    replicate_api_key: Optional[str] = Field(default=None)

    # Endpoint
    replicate_base_url: str = Field(default=DEFAULT_BASE_URL)

    # Transport
    replicate_timeout: float = Field(default=30.0)

    # Logging
    replicate_log_level: str = Field(default="INFO")
    replicate_log_format: str = Field(default="json")

    def get_api_key(self) -> str:
        """Return the API token or raise ``MissingCredentialsError``."""
        if not self.replicate_api_key:
            raise MissingCredentialsError(
                "REPLICATE_API_KEY not provided in environment variable"
            )
        return self.replicate_api_key

    def get_base_url(self) -> str:
        """Return the API base URL without a trailing slash."""
        return self.replicate_base_url.rstrip("/")


@lru_cache(maxsize=1)
def get_config() -> ReplicateConfig:
    """Get the process-wide configuration.

    Resolved once on first use; later calls return the same instance. Pass a
    ``ReplicateConfig`` explicitly to clients when isolation is needed (tests,
    multiple accounts).
    """
    return ReplicateConfig()
