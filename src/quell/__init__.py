"""Quell: client-side caching for GraphQL queries."""

from quell.cache import CacheStore, MemoryCacheStore, SqliteCacheStore, create_store
from quell.client import QuellClient, Transport, quellify
from quell.config import QuellConfig, load_config
from quell.core.errors import (
    CacheStoreError,
    ConfigError,
    QuellError,
    QueryParseError,
    TransportError,
)
from quell.prototype import OperationKind, ParseResult, parse_ast, parse_query

__version__ = "0.1.0"

__all__ = [
    "CacheStore",
    "CacheStoreError",
    "ConfigError",
    "MemoryCacheStore",
    "OperationKind",
    "ParseResult",
    "QuellClient",
    "QuellConfig",
    "QuellError",
    "QueryParseError",
    "SqliteCacheStore",
    "Transport",
    "TransportError",
    "create_store",
    "load_config",
    "parse_ast",
    "parse_query",
    "quellify",
]
