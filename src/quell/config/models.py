"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (QUELL__SECTION__KEY)
3. Project YAML (.quell/config.yaml)
4. Global YAML (~/.config/quell/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    QUELL__<SECTION>__<KEY>=<VALUE>

Examples:
    QUELL__LOGGING__LEVEL=DEBUG
    QUELL__CACHE__DEFAULT_CACHE_TIME=120
    QUELL__CACHE__USER_DEFINED_ID=isbn
    QUELL__TRANSPORT__TIMEOUT_SEC=10
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
CacheType = Literal["memory", "sqlite"]

# Per-call option keys accepted by quellify()
_OPTION_ALIASES: dict[str, tuple[str, str]] = {
    "__defaultCacheTime": ("cache", "default_cache_time"),
    "__cacheType": ("cache", "cache_type"),
    "__userDefinedID": ("cache", "user_defined_id"),
    "headers": ("transport", "headers"),
}


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        QUELL__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every routing decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class CacheConfig(BaseModel):
    """Client cache configuration.

    Env vars:
        QUELL__CACHE__DEFAULT_CACHE_TIME: Record lifetime in seconds
        QUELL__CACHE__CACHE_TYPE: memory or sqlite
        QUELL__CACHE__CACHE_PATH: SQLite file (sqlite only)
        QUELL__CACHE__USER_DEFINED_ID: Custom identifier field name
    """

    default_cache_time: int = Field(
        default=600,
        description="Seconds a cached record stays readable. Enforced by the store.",
    )
    cache_type: CacheType = Field(
        default="memory",
        description="Storage backend. 'memory' lives for the process, 'sqlite' persists.",
    )
    cache_path: str | None = Field(
        default=None,
        description="SQLite database file. Default: .quell/cache.db in the working directory.",
    )
    user_defined_id: str | None = Field(
        default=None,
        description="Argument/field name used as the unique identifier. "
        "Takes precedence over id, _id, ID and Id.",
    )

    @field_validator("default_cache_time")
    @classmethod
    def validate_cache_time(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Cache time must be >= 0, got {v}")
        return v


class TransportConfig(BaseModel):
    """HTTP transport configuration.

    Env vars:
        QUELL__TRANSPORT__TIMEOUT_SEC: Request timeout
    """

    headers: dict[str, str] = Field(
        default_factory=lambda: {"Content-Type": "application/json"},
        description="Default request headers. User headers replace these entirely.",
    )
    timeout_sec: float | None = Field(
        default=30.0,
        description="Request timeout. None disables it.",
    )


class QuellConfig(BaseModel):
    """Root configuration for Quell.

    All settings can be configured via:
    1. Environment variables: QUELL__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    4. Per-call options passed to quellify()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)

    def with_options(self, options: dict[str, Any] | None) -> "QuellConfig":
        """Return a copy with per-call options merged over this config.

        Accepts the client's option keys (``__defaultCacheTime``, ``__cacheType``,
        ``__userDefinedID``, ``headers``). Unknown keys are ignored.
        """
        if not options:
            return self
        data = self.model_dump()
        for key, value in options.items():
            target = _OPTION_ALIASES.get(key)
            if target is None:
                continue
            section, name = target
            data[section][name] = value
        return QuellConfig.model_validate(data)
