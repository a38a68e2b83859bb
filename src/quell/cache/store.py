"""Cache store interface and the in-memory store.

The reconciliation engine only talks to a CacheStore it was handed; stores
are shared by every call on that client and must tolerate concurrent point
reads, writes and whole-store clears.

Expiry is the store's business: each write stamps ``expires_at`` from
``default_cache_time`` and expired rows are invisible to reads.
"""

from __future__ import annotations

import copy
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from quell.cache.models import CacheRecord, NormalizedBatch, QueryIndexEntry
from quell.cache.normalize import normalize_response
from quell.core.logging import get_logger
from quell.prototype.models import Prototype

log = get_logger(__name__)


class CacheStore(ABC):
    """Key-indexed store of normalized records."""

    def __init__(
        self,
        default_cache_time: int = 600,
        user_defined_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.default_cache_time = default_cache_time
        self.user_defined_id = user_defined_id
        self._clock = clock

    @abstractmethod
    def lookup(self, cache_key: str) -> list[CacheRecord]:
        """Records a root field with this key returned last time, in order."""

    @abstractmethod
    def find(self, query_type: str, entity_id: str | None = None) -> list[CacheRecord]:
        """Point lookup by (query type, id). Without an id, every record of the type."""

    @abstractmethod
    def write(self, batch: NormalizedBatch) -> None:
        """Persist a batch. Entity data is merged over live existing data."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every record."""

    def normalize(
        self,
        data: Mapping[str, Any] | None,
        query_type_map: Mapping[str, str] | None,
        is_mutation: bool,
        field_map: Mapping[str, str] | None,
        prototype: Prototype,
        *,
        user_defined_id: str | None = None,
        cache_time: int | None = None,
    ) -> int:
        """Normalize a response's data into the store. Returns rows written.

        ``user_defined_id`` and ``cache_time`` override the store defaults for
        this write only.
        """
        lifetime = self.default_cache_time if cache_time is None else cache_time
        batch = normalize_response(
            data,
            query_type_map,
            is_mutation,
            field_map,
            prototype,
            user_defined_id=user_defined_id or self.user_defined_id,
            expires_at=self._now() + lifetime,
        )
        if batch:
            self.write(batch)
        log.debug(
            "cache_normalized",
            entities=len(batch.entities),
            queries=len(batch.queries),
            from_mutation=is_mutation,
        )
        return len(batch)

    def close(self) -> None:
        """Release resources held by the store."""

    def _now(self) -> float:
        return self._clock()


class MemoryCacheStore(CacheStore):
    """Process-lifetime store guarded by a lock.

    Records are deep-copied on the way in and out, so callers never share
    nested lists or dicts with the stored data.
    """

    def __init__(
        self,
        default_cache_time: int = 600,
        user_defined_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(default_cache_time, user_defined_id, clock)
        self._lock = threading.Lock()
        self._entities: dict[str, CacheRecord] = {}
        self._queries: dict[str, QueryIndexEntry] = {}

    def lookup(self, cache_key: str) -> list[CacheRecord]:
        now = self._now()
        with self._lock:
            entry = self._queries.get(cache_key)
            if entry is None or entry.is_expired(now):
                return []
            records = [self._entities.get(key) for key in entry.entity_keys]
            return [copy.deepcopy(r) for r in records if r is not None and not r.is_expired(now)]

    def find(self, query_type: str, entity_id: str | None = None) -> list[CacheRecord]:
        now = self._now()
        query_type = query_type.lower()
        with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._entities.values()
                if r.query_type == query_type
                and (entity_id is None or r.entity_id == str(entity_id))
                and not r.is_expired(now)
            ]

    def write(self, batch: NormalizedBatch) -> None:
        now = self._now()
        with self._lock:
            for key, record in batch.entities.items():
                stored = copy.deepcopy(record)
                existing = self._entities.get(key)
                if existing is not None and not existing.is_expired(now):
                    stored.data = {**existing.data, **stored.data}
                self._entities[key] = stored
            for entry in batch.queries:
                self._queries[entry.cache_key] = copy.deepcopy(entry)

    def clear(self) -> None:
        with self._lock:
            self._entities.clear()
            self._queries.clear()
        log.info("cache_cleared", store="memory")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entities)
