"""Cache reconciliation engine and network transport."""

from quell.client.engine import QuellClient, find_mutation, get_default_client, is_insert_mutation, quellify
from quell.client.merge import ResponseMerger, merge_responses
from quell.client.transport import Transport

__all__ = [
    "QuellClient",
    "ResponseMerger",
    "Transport",
    "find_mutation",
    "get_default_client",
    "is_insert_mutation",
    "merge_responses",
    "quellify",
]
