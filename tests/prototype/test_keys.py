"""Tests for prototype/keys.py."""

import pytest

from quell.prototype.compiler import parse_query
from quell.prototype.keys import entity_key, generate_cache_key, query_key


class TestGenerateCacheKey:
    """Cache key derivation tests."""

    @pytest.mark.parametrize(
        ("query", "root", "expected"),
        [
            ("{ country(id: 1) { id } }", "country", "country--1"),
            ('{ Canada: country(id: "ca") { id } }', "Canada", "country--ca"),
            ("{ countries { id } }", "countries", "countries"),
            ('{ Book(_id: "b7") { _id } }', "Book", "book--b7"),
        ],
    )
    def test_given_root_node_when_keyed_then_type_and_id(self, query: str, root: str, expected: str) -> None:
        """Key is the lower-cased type, joined to the id when there is one."""
        result = parse_query(query)

        assert generate_cache_key(result.prototype[root]) == expected

    def test_given_same_node_when_keyed_twice_then_equal(self) -> None:
        """Key derivation is deterministic."""
        node = {"__type": "country", "__id": "1", "id": True}

        assert generate_cache_key(node) == generate_cache_key(dict(node))


class TestEntityKey:
    """entity_key() tests."""

    def test_given_mixed_case_type_when_keyed_then_lower_cased(self) -> None:
        assert entity_key("Country", 3) == "country--3"


class TestQueryKey:
    """Query index key tests."""

    @pytest.mark.parametrize(
        ("query", "root", "expected"),
        [
            ("{ countries { id } }", "countries", "countries"),
            ("{ country(id: 1) { id } }", "country", "country--1"),
            ('{ books(genre: "scifi") { id } }', "books", 'books{"genre":"scifi"}'),
            ('{ books(limit: 5, genre: "scifi") { id } }', "books", 'books{"genre":"scifi","limit":"5"}'),
            ('{ book(id: 7, format: "pdf") { id } }', "book", 'book--7{"format":"pdf"}'),
        ],
    )
    def test_given_root_node_when_keyed_then_filters_appended(self, query: str, root: str, expected: str) -> None:
        """Non-identifier arguments are appended sorted, identifier arguments are not."""
        result = parse_query(query)

        assert query_key(result.prototype[root]) == expected

    def test_given_filters_differing_when_keyed_then_keys_differ(self) -> None:
        scifi = parse_query('{ books(genre: "scifi") { id } }').prototype["books"]
        romance = parse_query('{ books(genre: "romance") { id } }').prototype["books"]

        assert query_key(scifi) != query_key(romance)

    def test_given_user_defined_id_argument_when_keyed_then_not_a_filter(self) -> None:
        result = parse_query('{ book(isbn: "978") { isbn } }', user_defined_id="isbn")

        assert query_key(result.prototype["book"], "isbn") == "book--978"
