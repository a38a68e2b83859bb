"""Persistent cache store on SQLite via SQLModel."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from pathlib import Path

from sqlalchemy import ColumnElement, delete, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import col, select

from quell.cache.database import Database
from quell.cache.models import CachedEntity, CachedQuery, CacheRecord, NormalizedBatch
from quell.cache.store import CacheStore
from quell.core.errors import CacheStoreError
from quell.core.logging import get_logger

log = get_logger(__name__)


class SqliteCacheStore(CacheStore):
    """Cache store that survives restarts. Safe to share across threads."""

    def __init__(
        self,
        db_path: Path,
        default_cache_time: int = 600,
        user_defined_id: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(default_cache_time, user_defined_id, clock)
        self.db = Database(db_path)
        self.db.create_all()

    def lookup(self, cache_key: str) -> list[CacheRecord]:
        now = self._now()
        try:
            with self.db.session() as session:
                query = session.get(CachedQuery, cache_key)
                if query is None or (query.expires_at is not None and query.expires_at <= now):
                    return []
                keys = query.entity_keys
                if not keys:
                    return []
                rows = session.exec(
                    select(CachedEntity).where(
                        col(CachedEntity.key).in_(keys),
                        _live(now),
                    )
                ).all()
                by_key = {row.key: row.to_record() for row in rows}
        except SQLAlchemyError as e:
            raise CacheStoreError.read_failed(cache_key, str(e)) from e
        return [by_key[key] for key in keys if key in by_key]

    def find(self, query_type: str, entity_id: str | None = None) -> list[CacheRecord]:
        now = self._now()
        statement = select(CachedEntity).where(
            CachedEntity.query_type == query_type.lower(),
            _live(now),
        )
        if entity_id is not None:
            statement = statement.where(CachedEntity.entity_id == str(entity_id))
        try:
            with self.db.session() as session:
                return [row.to_record() for row in session.exec(statement).all()]
        except SQLAlchemyError as e:
            raise CacheStoreError.read_failed(f"{query_type}:{entity_id}", str(e)) from e

    def write(self, batch: NormalizedBatch) -> None:
        now = self._now()
        try:
            with self.db.immediate_transaction() as session:
                for key, record in batch.entities.items():
                    row = session.get(CachedEntity, key)
                    data = record.data
                    if row is None:
                        row = CachedEntity(key=key, query_type=record.query_type, entity_id=record.entity_id)
                    elif row.expires_at is None or row.expires_at > now:
                        data = {**json.loads(row.data_json), **data}
                    row.data_json = json.dumps(data)
                    row.from_mutation = record.from_mutation
                    row.expires_at = record.expires_at
                    session.add(row)
                for entry in batch.queries:
                    session.merge(
                        CachedQuery(
                            cache_key=entry.cache_key,
                            query_type=entry.query_type,
                            entity_keys_json=json.dumps(entry.entity_keys),
                            from_mutation=entry.from_mutation,
                            expires_at=entry.expires_at,
                        )
                    )
        except SQLAlchemyError as e:
            raise CacheStoreError.write_failed(str(e), entities=len(batch.entities)) from e

    def clear(self) -> None:
        try:
            with self.db.immediate_transaction() as session:
                session.execute(delete(CachedEntity))
                session.execute(delete(CachedQuery))
        except SQLAlchemyError as e:
            raise CacheStoreError.write_failed(str(e), operation="clear") from e
        log.info("cache_cleared", store="sqlite", path=str(self.db.db_path))

    def close(self) -> None:
        self.db.dispose()


def _live(now: float) -> ColumnElement[bool]:
    return or_(col(CachedEntity.expires_at).is_(None), col(CachedEntity.expires_at) > now)
