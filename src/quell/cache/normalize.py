"""Turn a GraphQL response into cache records.

Each object that carries an identifier becomes a CacheRecord keyed
``<category>--<id>``, holding the fields the prototype asked for (nested
relations are kept inline as returned). Nested objects with identifiers are
recorded as entities of their own too. Every root field also gets a
QueryIndexEntry so a later lookup by the same root key and non-identifier
arguments finds its entities.

Objects without an identifier cannot be addressed and are skipped.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from quell.cache.models import CacheRecord, NormalizedBatch, QueryIndexEntry
from quell.prototype.keys import entity_key, query_key
from quell.prototype.models import (
    Prototype,
    ProtoNode,
    identifier_names,
    iter_fields,
    node_type,
)


def lower_map(mapping: Mapping[str, str] | None) -> dict[str, str]:
    """Lower-case keys and values so lookups are case-insensitive."""
    return {str(k).lower(): str(v).lower() for k, v in (mapping or {}).items()}


def entity_id_of(obj: Mapping[str, Any], user_defined_id: str | None = None) -> str | None:
    for name in identifier_names(user_defined_id):
        value = obj.get(name)
        if value is not None:
            return str(value)
    return None


def resolve_category(
    field_key: str,
    node: ProtoNode,
    field_map: Mapping[str, str],
    query_type_map: Mapping[str, str],
) -> str:
    """Category records of this field are filed under.

    ``field_map`` maps a field name to its type (``countries`` -> ``country``),
    ``query_type_map`` maps a type to a cache category. Both are optional and
    expected lower-cased; the field's own type is the fallback.
    """
    field_type = node_type(node) or field_key.lower()
    type_name = field_map.get(field_type) or field_map.get(field_key.lower()) or field_type
    return query_type_map.get(type_name, type_name)


class _Normalizer:
    def __init__(
        self,
        query_type_map: Mapping[str, str],
        field_map: Mapping[str, str],
        is_mutation: bool,
        user_defined_id: str | None,
        expires_at: float | None,
    ) -> None:
        self.query_type_map = query_type_map
        self.field_map = field_map
        self.is_mutation = is_mutation
        self.user_defined_id = user_defined_id
        self.expires_at = expires_at
        self.batch = NormalizedBatch()

    def root(self, field_key: str, node: ProtoNode, value: Any) -> None:
        category = resolve_category(field_key, node, self.field_map, self.query_type_map)
        items = value if isinstance(value, list) else [value]
        keys = [
            key
            for item in items
            if isinstance(item, dict) and (key := self.entity(item, node, category)) is not None
        ]
        self.batch.queries.append(
            QueryIndexEntry(
                cache_key=query_key(node, self.user_defined_id),
                query_type=category,
                entity_keys=keys,
                from_mutation=self.is_mutation,
                expires_at=self.expires_at,
            )
        )

    def entity(self, obj: dict[str, Any], node: ProtoNode, category: str) -> str | None:
        for field_key, child in iter_fields(node):
            if isinstance(child, dict):
                self.nested(field_key, child, obj.get(field_key))

        entity_id = entity_id_of(obj, self.user_defined_id)
        if entity_id is None:
            return None
        key = entity_key(category, entity_id)
        data = {name: obj[name] for name, _ in iter_fields(node) if name in obj}
        existing = self.batch.entities.get(key)
        if existing is not None:
            existing.data.update(data)
            return key
        self.batch.entities[key] = CacheRecord(
            key=key,
            query_type=category,
            entity_id=entity_id,
            data=data,
            from_mutation=self.is_mutation,
            expires_at=self.expires_at,
        )
        return key

    def nested(self, field_key: str, node: ProtoNode, value: Any) -> None:
        if value is None:
            return
        category = resolve_category(field_key, node, self.field_map, self.query_type_map)
        for item in value if isinstance(value, list) else [value]:
            if isinstance(item, dict):
                self.entity(item, node, category)


def normalize_response(
    data: Mapping[str, Any] | None,
    query_type_map: Mapping[str, str] | None,
    is_mutation: bool,
    field_map: Mapping[str, str] | None,
    prototype: Prototype,
    *,
    user_defined_id: str | None = None,
    expires_at: float | None = None,
) -> NormalizedBatch:
    """Normalize the ``data`` member of a response against its prototype."""
    normalizer = _Normalizer(
        query_type_map=lower_map(query_type_map),
        field_map=lower_map(field_map),
        is_mutation=is_mutation,
        user_defined_id=user_defined_id,
        expires_at=expires_at,
    )
    for field_key, node in prototype.items():
        value = (data or {}).get(field_key)
        if value is None or not isinstance(node, dict):
            continue
        normalizer.root(field_key, node, value)
    return normalizer.batch
