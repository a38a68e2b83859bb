"""Cache key derivation."""

import json
from typing import Any

from quell.config.constants import KEY_SEPARATOR
from quell.prototype.models import ProtoNode, identifier_names, node_args, node_id, node_type


def generate_cache_key(node: ProtoNode) -> str:
    """Key for a prototype node: ``<type>--<id>`` when an id argument was given.

    >>> generate_cache_key({"__type": "country", "__id": "1"})
    'country--1'
    >>> generate_cache_key({"__type": "countries", "__id": None})
    'countries'
    """
    query_type = node_type(node) or ""
    identifier = node_id(node)
    if identifier is None:
        return query_type
    return entity_key(query_type, identifier)


def query_key(node: ProtoNode, user_defined_id: str | None = None) -> str:
    """Query index key for a root node.

    The cache key plus every argument other than the identifier, sorted, so
    root fields that filter differently are indexed apart.

    >>> query_key({"__type": "books", "__id": None, "__args": {"genre": "scifi"}})
    'books{"genre":"scifi"}'
    >>> query_key({"__type": "country", "__id": "1", "__args": {"id": "1"}})
    'country--1'
    """
    skip = set(identifier_names(user_defined_id))
    filters = {name: value for name, value in (node_args(node) or {}).items() if name not in skip}
    key = generate_cache_key(node)
    if not filters:
        return key
    return key + json.dumps(filters, sort_keys=True, separators=(",", ":"), default=str)


def entity_key(query_type: str, entity_id: Any) -> str:
    return f"{query_type.lower()}{KEY_SEPARATOR}{entity_id}"
