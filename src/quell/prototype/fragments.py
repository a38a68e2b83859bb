"""Inline named fragments into a prototype."""

from __future__ import annotations

from quell.prototype.models import FragmentMap, Prototype, ProtoNode, is_meta_key


def expand_fragments(prototype: Prototype, fragments: FragmentMap) -> Prototype:
    """Return a new prototype with every fragment spread replaced by its fields.

    The compiler records a spread ``...CountryFields`` as ``CountryFields: True``
    inside the node it was used in. Fields requested directly win over the
    same field coming from a fragment. The input prototype is not modified.
    """
    return {key: _expand_node(node, fragments, frozenset()) for key, node in prototype.items()}


def _expand_node(node: ProtoNode, fragments: FragmentMap, seen: frozenset[str]) -> ProtoNode:
    expanded: ProtoNode = {}
    spreads: list[str] = []
    for key, value in node.items():
        if is_meta_key(key):
            expanded[key] = value
        elif value is True and key in fragments:
            spreads.append(key)
        elif isinstance(value, dict):
            expanded[key] = _expand_node(value, fragments, seen)
        else:
            expanded[key] = value

    for name in spreads:
        if name in seen:
            continue
        for key, value in _expand_node(fragments[name], fragments, seen | {name}).items():
            if isinstance(expanded.get(key), dict):
                continue
            expanded[key] = value
    return expanded
