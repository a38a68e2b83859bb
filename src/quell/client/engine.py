"""Cache reconciliation engine.

QuellClient.quellify() replaces a hand-written fetch for GraphQL:

1. The query is compiled into a prototype (see quell.prototype.compiler).
2. Operations the cache cannot represent are passed straight through.
3. Insert mutations are sent and their result is cached; update and delete
   mutations clear the whole cache, since any cached shape may embed the
   changed entity.
4. Queries look up every root field in the cache, always refresh from the
   server, cache the fresh data and merge both, fresh values first.

Transport and store failures propagate to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import Any

from quell.cache import CacheRecord, CacheStore, create_store
from quell.client.merge import ResponseMerger
from quell.client.transport import Transport
from quell.config.constants import CREATE_MUTATION_VERBS
from quell.config.models import QuellConfig
from quell.core.logging import clear_request_id, configure_logging, get_logger, set_request_id
from quell.prototype.compiler import parse_query
from quell.prototype.fragments import expand_fragments
from quell.prototype.keys import query_key
from quell.prototype.models import (
    OperationKind,
    ParseResult,
    Prototype,
    ProtoNode,
    node_args,
    node_type,
)

log = get_logger(__name__)

StrMap = Mapping[str, str]


def is_insert_mutation(type_name: str) -> bool:
    return any(verb in type_name for verb in CREATE_MUTATION_VERBS)


def find_mutation(prototype: Prototype, mutation_map: StrMap | None) -> ProtoNode | None:
    """Root prototype node for the first field named in ``mutation_map``."""
    names = {name.lower() for name in (mutation_map or {})}
    for key, node in prototype.items():
        if key.lower() in names or (node_type(node) or "") in names:
            return node
    return None


def _wrap(data: Any, response: dict[str, Any]) -> dict[str, Any]:
    wrapped: dict[str, Any] = {"data": data}
    if "errors" in response:
        wrapped["errors"] = response["errors"]
    return wrapped


class QuellClient:
    """GraphQL client with a normalized client-side cache.

    The store is owned by the client and shared by every call made through it.
    """

    def __init__(
        self,
        config: QuellConfig | None = None,
        store: CacheStore | None = None,
        transport: Transport | None = None,
    ) -> None:
        self.config = config or QuellConfig()
        self.store = store if store is not None else create_store(self.config)
        self.transport = transport or Transport(timeout=self.config.transport.timeout_sec)

    async def quellify(
        self,
        endpoint: str,
        query: str,
        mutation_map: StrMap | None = None,
        query_map: StrMap | None = None,
        query_type_map: StrMap | None = None,
        options: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Resolve ``query`` against the cache and ``endpoint``.

        Args:
            endpoint: GraphQL endpoint URL.
            query: Query text, sent verbatim whenever a request is made.
            mutation_map: Mutation field name -> type it changes.
            query_map: Field name -> type it returns (``countries`` -> ``country``).
            query_type_map: Type -> cache category.
            options: Per-call overrides (``__defaultCacheTime``,
                ``__userDefinedID``, ``headers``).

        Returns:
            The server response for pass-through operations and cache misses,
            otherwise ``{"data": <merged>}`` (plus ``errors`` when the server
            sent any).

        Raises:
            QueryParseError: ``query`` is not valid GraphQL.
            TransportError: The request failed.
            CacheStoreError: The store failed.
        """
        config = self.config.with_options(options)
        set_request_id()
        try:
            result = parse_query(query, user_defined_id=config.cache.user_defined_id)
            log.debug(
                "operation_compiled",
                kind=result.operation_kind.value if result.operation_kind else None,
                roots=list(result.prototype),
            )
            if result.operation_kind is OperationKind.QUERY:
                return await self._query(endpoint, query, result, query_map, query_type_map, config)
            if result.operation_kind is OperationKind.MUTATION:
                return await self._mutate(endpoint, query, result, mutation_map, query_type_map, config)
            log.info("operation_passthrough", reason=result.ineligible_reason)
            return await self.transport.send(endpoint, query, headers=config.transport.headers)
        finally:
            clear_request_id()

    async def _mutate(
        self,
        endpoint: str,
        query: str,
        result: ParseResult,
        mutation_map: StrMap | None,
        query_type_map: StrMap | None,
        config: QuellConfig,
    ) -> dict[str, Any]:
        headers = config.transport.headers
        node = find_mutation(result.prototype, mutation_map)
        if node is None:
            # cannot tell what changed
            log.info("mutation_unmapped", roots=list(result.prototype))
            self.store.clear()
            response = await self.transport.send(endpoint, query, headers=headers)
            return _wrap(response.get("data"), response)

        type_name = node_type(node) or ""
        if is_insert_mutation(type_name):
            response = await self.transport.send(endpoint, query, headers=headers)
            written = self.store.normalize(
                response.get("data"),
                query_type_map,
                True,
                mutation_map,
                result.prototype,
                user_defined_id=config.cache.user_defined_id,
                cache_time=config.cache.default_cache_time,
            )
            log.info("mutation_insert", mutation=type_name, records=written)
            return _wrap(response.get("data"), response)

        args = node_args(node) or {}
        method = "DELETE" if len(args) == 1 else "POST"
        log.info("mutation_invalidate", mutation=type_name, method=method)
        self.store.clear()
        response = await self.transport.send(endpoint, query, method=method, headers=headers)
        return _wrap(response.get("data"), response)

    async def _query(
        self,
        endpoint: str,
        query: str,
        result: ParseResult,
        query_map: StrMap | None,
        query_type_map: StrMap | None,
        config: QuellConfig,
    ) -> dict[str, Any]:
        prototype = (
            expand_fragments(result.prototype, result.fragments) if result.fragments else result.prototype
        )

        user_defined_id = config.cache.user_defined_id or self.store.user_defined_id
        cached: dict[str, list[CacheRecord]] = {}
        for root_key, node in prototype.items():
            records = self.store.lookup(query_key(node, user_defined_id))
            if records:
                cached[root_key] = records
        log.debug("cache_lookup", hits=sorted(cached), roots=len(prototype))

        response = await self.transport.send(endpoint, query, headers=config.transport.headers)
        self.store.normalize(
            response.get("data"),
            query_type_map,
            False,
            query_map,
            prototype,
            user_defined_id=config.cache.user_defined_id,
            cache_time=config.cache.default_cache_time,
        )

        if not cached:
            return response

        merged = ResponseMerger(config.cache.user_defined_id).merge(prototype, response.get("data"), cached)
        return _wrap(merged, response)

    async def aclose(self) -> None:
        await self.transport.aclose()
        self.store.close()

    async def __aenter__(self) -> QuellClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


_default_client: QuellClient | None = None


def get_default_client() -> QuellClient:
    """Client built from load_config(), created on first use.

    Creating it also applies the logging section of that config. Clients
    built directly leave logging to the caller (see configure_logging).
    """
    global _default_client  # noqa: PLW0603
    if _default_client is None:
        from quell.config.loader import load_config

        config = load_config()
        configure_logging(config=config.logging)
        _default_client = QuellClient(config)
    return _default_client


async def quellify(
    endpoint: str,
    query: str,
    mutation_map: StrMap | None = None,
    query_map: StrMap | None = None,
    query_type_map: StrMap | None = None,
    options: dict[str, Any] | None = None,
    *,
    client: QuellClient | None = None,
) -> dict[str, Any]:
    """Module-level shortcut for ``QuellClient.quellify`` on the default client."""
    return await (client or get_default_client()).quellify(
        endpoint, query, mutation_map, query_map, query_type_map, options
    )
