"""
Error hierarchy for the query service.

Store failures (``sqlalchemy.exc.SQLAlchemyError`` and driver errors) are
not wrapped: they reach the caller unchanged.  The classes below cover
caller mistakes that are rejected before any SQL is issued.
"""
from __future__ import annotations

from typing import Any, Iterable


class BlogStoreError(Exception):
    """Base class for errors raised by blogstore itself."""


class QueryError(BlogStoreError):
    """A query operation rejected one of its arguments."""

    def __init__(self, operation: str, parameter: str, value: Any, reason: str) -> None:
        self.operation = operation
        self.parameter = parameter
        self.value = value
        super().__init__(f"{operation}: {parameter}={value!r} {reason}")


class InvalidQueryParameterError(QueryError, ValueError):
    """Negative limit or offset."""


class UnsupportedSortKeyError(QueryError, ValueError):
    """The requested order key has no SQL ordering mapped to it."""

    def __init__(self, operation: str, key: Any, supported: Iterable[str]) -> None:
        self.key = key
        self.supported = tuple(supported)
        super().__init__(
            operation,
            "order_key",
            key,
            f"is not a supported sort key (expected one of: {', '.join(self.supported)})",
        )
