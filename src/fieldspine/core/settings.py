"""Settings for the field-schema resolver.

Configuration is read from ``FIELDSPINE_``-prefixed environment variables
and an optional ``.env`` file, validated by pydantic at startup. Explicit
constructor arguments on ``Mapper`` and the stores always win over
settings.

Examples:
    >>> from fieldspine.core.settings import FieldSpineSettings
    >>> s = FieldSpineSettings(cache_index=".fields-test")
    >>> s.cache_index
    '.fields-test'

Environment:
    FIELDSPINE_STORE_URL          Elasticsearch base URL
    FIELDSPINE_CACHE_INDEX        Index holding cached field tables
    FIELDSPINE_REQUEST_TIMEOUT    Per-request timeout in seconds
    FIELDSPINE_DEDUPE_DISCOVERY   Share one discovery among concurrent callers
    FIELDSPINE_LOG_LEVEL          DEBUG | INFO | WARNING | ERROR
    FIELDSPINE_LOG_FORMAT         json | console

Tags:
    settings, configuration, pydantic, environment, fieldspine
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FieldSpineSettings(BaseSettings):
    """Resolver and store settings.

    Fields
    ──────
    store_url        : Base URL of the backing Elasticsearch cluster
    cache_index      : Index where resolved field tables are persisted
    request_timeout  : HTTP timeout (seconds) for store calls
    dedupe_discovery : Concurrent get_fields for one key share a discovery
    log_level        : Structlog log level
    log_format       : json | console
    service_name     : Value of ``service.name`` in log events
    """

    model_config = SettingsConfigDict(
        env_prefix="FIELDSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Store ────────────────────────────────────────────────────
    store_url: str = "http://localhost:9200"
    cache_index: str = Field(
        default=".fieldspine",
        description="Index holding one cached field table per pattern",
    )
    request_timeout: float = Field(default=10.0, gt=0)

    # ── Resolution ───────────────────────────────────────────────
    dedupe_discovery: bool = True

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"
    service_name: str = "fieldspine"

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level: {value}")
        return value

    @field_validator("store_url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> FieldSpineSettings:
    """Return the process-wide settings instance (read once)."""
    return FieldSpineSettings()


__all__ = ["FieldSpineSettings", "get_settings"]
