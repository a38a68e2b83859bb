"""Merge cached records with a fresh response.

For each root field of the prototype the result holds exactly the requested
fields, nested and aliased as the prototype says. A field the fresh response
carries always wins, even when it is null; a cached value is used only when
the fresh response lacks the field altogether. Fields neither side has come
back as None. List items are paired with cached items by identifier.
"""

from __future__ import annotations

from typing import Any

from quell.cache.models import CacheRecord
from quell.cache.normalize import entity_id_of
from quell.prototype.models import Prototype, ProtoNode, iter_fields, node_id


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class ResponseMerger:
    def __init__(self, user_defined_id: str | None = None) -> None:
        self.user_defined_id = user_defined_id

    def merge(
        self,
        prototype: Prototype,
        fresh_data: dict[str, Any] | None,
        cached: dict[str, list[CacheRecord]],
    ) -> dict[str, Any]:
        """Return the merged ``data`` object.

        Root keys of ``fresh_data`` the prototype does not describe are kept
        as fetched.
        """
        merged = dict(fresh_data or {})
        for root_key, node in prototype.items():
            fresh = (fresh_data or {}).get(root_key, MISSING)
            merged[root_key] = self.value(node, fresh, _cached_root(node, cached.get(root_key)))
        return merged

    def value(self, node: ProtoNode, fresh: Any, cached: Any) -> Any:
        if fresh is None:
            return None
        if fresh is MISSING:
            if cached is MISSING or cached is None:
                return None
            fresh_is_list = isinstance(cached, list)
        else:
            fresh_is_list = isinstance(fresh, list)
        if fresh_is_list:
            return self.items(node, fresh, cached)
        return self.entity(node, fresh, cached)

    def items(self, node: ProtoNode, fresh: Any, cached: Any) -> list[Any]:
        cached_items = cached if isinstance(cached, list) else []
        if fresh is MISSING:
            return [self.entity(node, MISSING, item) for item in cached_items]
        by_id = {
            entity_id: item
            for item in cached_items
            if isinstance(item, dict) and (entity_id := entity_id_of(item, self.user_defined_id))
        }
        merged = []
        for item in fresh:
            if not isinstance(item, dict):
                merged.append(item)
                continue
            match = by_id.get(entity_id_of(item, self.user_defined_id) or "", MISSING)
            merged.append(self.entity(node, item, match))
        return merged

    def entity(self, node: ProtoNode, fresh: Any, cached: Any) -> dict[str, Any]:
        fresh_obj = fresh if isinstance(fresh, dict) else {}
        cached_obj = cached if isinstance(cached, dict) else {}
        result: dict[str, Any] = {}
        for key, child in iter_fields(node):
            fresh_value = fresh_obj.get(key, MISSING)
            cached_value = cached_obj.get(key, MISSING)
            if isinstance(child, dict):
                result[key] = self.value(child, fresh_value, cached_value)
            elif fresh_value is not MISSING:
                result[key] = fresh_value
            elif cached_value is not MISSING:
                result[key] = cached_value
            else:
                result[key] = None
        return result


def _cached_root(node: ProtoNode, records: list[CacheRecord] | None) -> Any:
    if not records:
        return MISSING
    if node_id(node) is not None:
        return records[0].data
    return [record.data for record in records]


def merge_responses(
    prototype: Prototype,
    fresh_data: dict[str, Any] | None,
    cached: dict[str, list[CacheRecord]],
    user_defined_id: str | None = None,
) -> dict[str, Any]:
    return ResponseMerger(user_defined_id).merge(prototype, fresh_data, cached)
