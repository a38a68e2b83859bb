"""Tests for error types and codes."""

import pytest

from quell.core.errors import (
    CacheStoreError,
    ConfigError,
    ErrorCode,
    QuellError,
    QueryParseError,
    TransportError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.QUERY_SYNTAX_ERROR, 3000),
            (ErrorCode.TRANSPORT_BAD_STATUS, 4000),
            (ErrorCode.CACHE_WRITE_FAILED, 5000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestQuellError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = QuellError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        # Given
        error = QuellError(code=ErrorCode.CACHE_READ_FAILED, message="Something broke")

        # When
        result = str(error)

        # Then
        assert result == "[5001] CACHE_READ_FAILED: Something broke"

    def test_given_subclass_when_raised_then_caught_as_base(self) -> None:
        with pytest.raises(QuellError):
            raise TransportError.request_failed("http://x", "refused")


class TestConfigError:
    """ConfigError factory method tests."""

    @pytest.mark.parametrize(
        ("factory", "kwargs", "expected_code"),
        [
            ("parse_error", {"path": "/foo", "reason": "bad yaml"}, ErrorCode.CONFIG_PARSE_ERROR),
            (
                "invalid_value",
                {"field": "cache.default_cache_time", "value": -1, "reason": "negative"},
                ErrorCode.CONFIG_INVALID_VALUE,
            ),
        ],
    )
    def test_given_factory_when_called_then_correct_code(
        self, factory: str, kwargs: dict[str, object], expected_code: ErrorCode
    ) -> None:
        """Factory methods produce errors with correct error codes."""
        error = getattr(ConfigError, factory)(**kwargs)

        assert error.code == expected_code


class TestQueryParseError:
    def test_given_locations_when_created_then_in_details(self) -> None:
        error = QueryParseError.syntax_error("Expected Name", [(1, 17)])

        assert error.details["locations"] == [(1, 17)]
        assert "Expected Name" in error.message
        assert not error.retryable


class TestTransportError:
    """TransportError retryability tests."""

    @pytest.mark.parametrize(("status", "retryable"), [(500, True), (503, True), (404, False), (400, False)])
    def test_given_status_when_bad_status_then_retryable_for_5xx(self, status: int, retryable: bool) -> None:
        error = TransportError.bad_status("http://api/graphql", status)

        assert error.retryable is retryable
        assert error.details["status_code"] == status

    def test_given_request_failure_when_created_then_retryable(self) -> None:
        error = TransportError.request_failed("http://api/graphql", "timeout")

        assert error.retryable
        assert error.code is ErrorCode.TRANSPORT_REQUEST_FAILED


class TestCacheStoreError:
    def test_given_write_failure_when_created_then_extras_in_details(self) -> None:
        error = CacheStoreError.write_failed("disk full", entities=3)

        assert error.details == {"entities": 3}
        assert error.code is ErrorCode.CACHE_WRITE_FAILED

