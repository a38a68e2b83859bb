"""Client cache stores and response normalization."""

from pathlib import Path

from quell.cache.models import CacheRecord, NormalizedBatch, QueryIndexEntry
from quell.cache.normalize import normalize_response
from quell.cache.sqlite import SqliteCacheStore
from quell.cache.store import CacheStore, MemoryCacheStore
from quell.config.loader import get_cache_path
from quell.config.models import QuellConfig


def create_store(config: QuellConfig, project_root: Path | None = None) -> CacheStore:
    """Build the store named by ``config.cache.cache_type``."""
    cache = config.cache
    if cache.cache_type == "sqlite":
        return SqliteCacheStore(
            get_cache_path(config, project_root),
            default_cache_time=cache.default_cache_time,
            user_defined_id=cache.user_defined_id,
        )
    return MemoryCacheStore(
        default_cache_time=cache.default_cache_time,
        user_defined_id=cache.user_defined_id,
    )


__all__ = [
    "CacheRecord",
    "CacheStore",
    "MemoryCacheStore",
    "NormalizedBatch",
    "QueryIndexEntry",
    "SqliteCacheStore",
    "create_store",
    "normalize_response",
]
