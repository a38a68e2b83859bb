"""Core module exports."""

from quell.core.errors import (
    CacheStoreError,
    ConfigError,
    ErrorCode,
    QuellError,
    QueryParseError,
    TransportError,
)
from quell.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "CacheStoreError",
    "ConfigError",
    "ErrorCode",
    "QuellError",
    "QueryParseError",
    "TransportError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]
