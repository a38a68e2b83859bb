"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.
For configurable values, see models.py (CacheConfig, TransportConfig, etc.).
"""

# =============================================================================
# Identifiers
# =============================================================================

IDENTIFIER_NAMES: tuple[str, ...] = ("id", "_id", "ID", "Id")
"""Conventional identifier field/argument names. A configured custom id wins."""

# =============================================================================
# Prototype metadata
# =============================================================================
# Metadata lives inside each prototype node next to the requested fields.
# Anything starting with RESERVED_PREFIX is metadata or type-specific option,
# never a requested field.

RESERVED_PREFIX = "__"

META_ID = "__id"
META_TYPE = "__type"
META_ALIAS = "__alias"
META_ARGS = "__args"

# =============================================================================
# Mutations
# =============================================================================

CREATE_MUTATION_VERBS: tuple[str, ...] = ("add", "new", "create", "make")
"""A mutation whose type name contains one of these is treated as an insert."""

KEY_SEPARATOR = "--"
"""Joins type and identifier in cache keys: ``country--1``."""
