"""Error taxonomy for query submission."""

from __future__ import annotations

from typing import Any

LOAD_DATA_FIRST_MESSAGE = "Please load data first"
DEFAULT_ERROR_MESSAGE = "Error processing request"


class QueryError(Exception):
    """Base class for failures converted into an error result."""

    def __init__(self, message: str, *, stack: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.stack = stack


class NoDatasetError(QueryError):
    """No rows could be resolved from any dataset source."""

    def __init__(self, message: str = LOAD_DATA_FIRST_MESSAGE) -> None:
        super().__init__(message)


class ServiceError(QueryError):
    """The query service answered with a non-2xx status."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        details: Any = None,
        stack: str | None = None,
    ) -> None:
        super().__init__(message, stack=stack)
        self.status_code = status_code
        self.details = details


class TransportError(QueryError):
    """The call itself failed: network error, timeout, or malformed JSON."""
