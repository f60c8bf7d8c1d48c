"""
Test assertions for Result values.

Expressive assert helpers that produce clear failure messages.

Usage in tests:
    from railbridge.testing import ResultAssertions

    def test_find_user():
        user = ResultAssertions.assert_success(service.find("1"))
        assert user["name"] == "Alice"

    def test_missing_user():
        result = service.find("999")
        ResultAssertions.assert_failure_code(result, ErrorCode.NOT_FOUND)
        ResultAssertions.assert_failure_message_contains(result, "not found")
"""

from __future__ import annotations

from typing import Any, Optional, TypeVar

from railbridge.errors import ErrorCode
from railbridge.result import Result

T = TypeVar("T")
E = TypeVar("E")


class ResultAssertions:
    """Expressive test assertions for Result values."""

    @staticmethod
    def assert_success(result: Result[T, Any], message: str = "") -> T:
        """
        Assert the Result is a Success and return the value.

            value = ResultAssertions.assert_success(result)
        """
        context = f" — {message}" if message else ""
        assert result.is_success(), f"Expected Success but got {result!r}{context}"
        return result.unwrap()

    @staticmethod
    def assert_failure(
        result: Result[Any, E],
        expected_type: Optional[type] = None,
        message: str = "",
    ) -> E:
        """
        Assert the Result is a Failure, optionally of a given error type.

            error = ResultAssertions.assert_failure(result, NotFoundError)
        """
        context = f" — {message}" if message else ""
        assert result.is_failure(), f"Expected Failure but got {result!r}{context}"
        error = result.error()
        if expected_type is not None:
            assert isinstance(error, expected_type), (
                f"Expected {expected_type.__name__} but got {type(error).__name__}: "
                f"{error!r}{context}"
            )
        return error

    @staticmethod
    def assert_failure_code(result: Result[Any, Any], expected_code: ErrorCode | str) -> None:
        """Assert the failure carries the given taxonomy code."""
        error = ResultAssertions.assert_failure(result)
        expected = expected_code.value if isinstance(expected_code, ErrorCode) else expected_code
        actual = getattr(error, "code", None)
        assert actual == expected, (
            f"Expected error code {expected} but got {actual}: {error!r}"
        )

    @staticmethod
    def assert_failure_message_contains(result: Result[Any, Any], substring: str) -> None:
        """Assert that the failure message contains the given substring (case-insensitive)."""
        error = ResultAssertions.assert_failure(result)
        assert substring.lower() in str(error).lower(), (
            f"Expected failure message to contain {substring!r} "
            f"but message was: {str(error)!r}"
        )

    @staticmethod
    def assert_success_value(result: Result[Any, Any], expected_value: Any) -> None:
        """Assert the Result is a Success with the specific value."""
        value = ResultAssertions.assert_success(result)
        assert value == expected_value, (
            f"Expected success value {expected_value!r} but got {value!r}"
        )
