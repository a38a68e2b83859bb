"""Cache record types.

CacheRecord and QueryIndexEntry are what stores hand out. The SQLModel
tables below are the SQLite layout behind SqliteCacheStore; data columns hold
JSON text.
"""

import json
from dataclasses import dataclass, field
from typing import Any

from sqlmodel import Field, SQLModel


@dataclass
class CacheRecord:
    """One normalized entity, e.g. ``country--1``."""

    key: str
    query_type: str
    entity_id: str
    data: dict[str, Any] = field(default_factory=dict)
    from_mutation: bool = False
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


@dataclass
class QueryIndexEntry:
    """Entities a root field returned, in response order.

    ``cache_key`` is the root field's key (``countries``, ``country--1``).
    """

    cache_key: str
    query_type: str
    entity_keys: list[str] = field(default_factory=list)
    from_mutation: bool = False
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at <= now


@dataclass
class NormalizedBatch:
    """Everything one response normalizes into."""

    entities: dict[str, CacheRecord] = field(default_factory=dict)
    queries: list[QueryIndexEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entities) + len(self.queries)


# ============================================================================
# SQLITE TABLES
# ============================================================================


class CachedEntity(SQLModel, table=True):
    """Normalized entity row."""

    __tablename__ = "cached_entities"

    key: str = Field(primary_key=True)
    query_type: str = Field(index=True)
    entity_id: str = Field(index=True)
    data_json: str = "{}"
    from_mutation: bool = False
    expires_at: float | None = Field(default=None, index=True)

    def to_record(self) -> CacheRecord:
        return CacheRecord(
            key=self.key,
            query_type=self.query_type,
            entity_id=self.entity_id,
            data=json.loads(self.data_json),
            from_mutation=self.from_mutation,
            expires_at=self.expires_at,
        )


class CachedQuery(SQLModel, table=True):
    """Root field cache key to the entity keys it returned."""

    __tablename__ = "cached_queries"

    cache_key: str = Field(primary_key=True)
    query_type: str = Field(index=True)
    entity_keys_json: str = "[]"
    from_mutation: bool = False
    expires_at: float | None = Field(default=None, index=True)

    @property
    def entity_keys(self) -> list[str]:
        return list(json.loads(self.entity_keys_json))
