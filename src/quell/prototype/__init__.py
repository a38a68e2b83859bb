"""Query prototype compilation: AST to prototype, fragments and cache keys."""

from quell.prototype.compiler import PrototypeBuilder, parse_ast, parse_query
from quell.prototype.fragments import expand_fragments
from quell.prototype.keys import entity_key, generate_cache_key, query_key
from quell.prototype.models import (
    FragmentMap,
    OperationKind,
    ParseResult,
    Prototype,
    ProtoNode,
    iter_fields,
)

__all__ = [
    "FragmentMap",
    "OperationKind",
    "ParseResult",
    "PrototypeBuilder",
    "ProtoNode",
    "Prototype",
    "entity_key",
    "expand_fragments",
    "generate_cache_key",
    "iter_fields",
    "parse_ast",
    "parse_query",
    "query_key",
]
