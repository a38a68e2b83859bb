"""Prototype types and helpers.

A prototype is a plain nested dict:

    {"Canada": {"id": True, "name": True,
                "__type": "country", "__alias": "Canada",
                "__args": {"id": "1"}, "__id": "1"}}

Scalar fields map to ``True``, relations map to another node, and keys
starting with ``__`` carry metadata.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from quell.config.constants import (
    IDENTIFIER_NAMES,
    META_ARGS,
    META_ID,
    META_TYPE,
    RESERVED_PREFIX,
)

ProtoNode = dict[str, Any]
Prototype = dict[str, ProtoNode]
FragmentMap = dict[str, dict[str, Any]]


class OperationKind(str, Enum):
    """How an operation is routed.

    INELIGIBLE is terminal: once an operation is downgraded it is passed
    straight through to the server.
    """

    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"
    INELIGIBLE = "ineligible"


@dataclass
class ParseResult:
    """Output of compiling one document."""

    prototype: Prototype = field(default_factory=dict)
    operation_kind: OperationKind | None = None
    fragments: FragmentMap = field(default_factory=dict)
    ineligible_reason: str | None = None

    @property
    def cacheable(self) -> bool:
        return self.operation_kind in (OperationKind.QUERY, OperationKind.MUTATION)


def is_meta_key(key: str) -> bool:
    return key.startswith(RESERVED_PREFIX)


def iter_fields(node: ProtoNode) -> Iterator[tuple[str, Any]]:
    """Yield (name, value) for requested fields, skipping metadata."""
    for key, value in node.items():
        if not is_meta_key(key):
            yield key, value


def identifier_names(custom_id: str | None = None) -> tuple[str, ...]:
    """Identifier names in lookup order, custom id first."""
    if custom_id:
        return (custom_id, *IDENTIFIER_NAMES)
    return IDENTIFIER_NAMES


def has_identifier(names: Any, custom_id: str | None = None) -> bool:
    return any(name in names for name in identifier_names(custom_id))


def node_type(node: ProtoNode) -> str | None:
    return node.get(META_TYPE)


def node_id(node: ProtoNode) -> Any:
    return node.get(META_ID)


def node_args(node: ProtoNode) -> dict[str, Any] | None:
    return node.get(META_ARGS)
