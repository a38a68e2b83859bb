"""Quell error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Query parsing
- 4xxx: Transport
- 5xxx: Cache store

Eligibility downgrades (directives, variables, missing identifiers, ...) are
not errors and never surface here; those queries are passed through.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Query (3xxx)
    QUERY_SYNTAX_ERROR = 3001

    # Transport (4xxx)
    TRANSPORT_REQUEST_FAILED = 4001
    TRANSPORT_BAD_STATUS = 4002
    TRANSPORT_INVALID_JSON = 4003

    # Cache store (5xxx)
    CACHE_READ_FAILED = 5001
    CACHE_WRITE_FAILED = 5002


@dataclass(frozen=True, slots=True)
class QuellError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'TRANSPORT_BAD_STATUS')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(QuellError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class QueryParseError(QuellError):
    """Query text the GraphQL parser rejected."""

    @classmethod
    def syntax_error(cls, reason: str, locations: list[tuple[int, int]] | None = None) -> "QueryParseError":
        return cls(
            code=ErrorCode.QUERY_SYNTAX_ERROR,
            message=f"Invalid GraphQL query: {reason}",
            details={"reason": reason, "locations": locations or []},
        )


class TransportError(QuellError):
    """Network failures. Never replaced by a cached fallback."""

    @classmethod
    def request_failed(cls, endpoint: str, reason: str) -> "TransportError":
        return cls(
            code=ErrorCode.TRANSPORT_REQUEST_FAILED,
            message=f"Request to {endpoint} failed: {reason}",
            retryable=True,
            details={"endpoint": endpoint, "reason": reason},
        )

    @classmethod
    def bad_status(cls, endpoint: str, status_code: int) -> "TransportError":
        return cls(
            code=ErrorCode.TRANSPORT_BAD_STATUS,
            message=f"{endpoint} responded with HTTP {status_code}",
            retryable=status_code >= 500,
            details={"endpoint": endpoint, "status_code": status_code},
        )

    @classmethod
    def invalid_json(cls, endpoint: str, reason: str) -> "TransportError":
        return cls(
            code=ErrorCode.TRANSPORT_INVALID_JSON,
            message=f"{endpoint} returned a non-JSON body: {reason}",
            details={"endpoint": endpoint, "reason": reason},
        )


class CacheStoreError(QuellError):
    """Cache store read/write failures."""

    @classmethod
    def read_failed(cls, key: str, reason: str) -> "CacheStoreError":
        return cls(
            code=ErrorCode.CACHE_READ_FAILED,
            message=f"Cache read for '{key}' failed: {reason}",
            retryable=True,
            details={"key": key, "reason": reason},
        )

    @classmethod
    def write_failed(cls, reason: str, **details: Any) -> "CacheStoreError":
        return cls(
            code=ErrorCode.CACHE_WRITE_FAILED,
            message=f"Cache write failed: {reason}",
            retryable=True,
            details=details,
        )
