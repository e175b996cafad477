"""Exception types shared across the Splitwise MCP package."""

from typing import Any


class SplitwiseMcpError(Exception):
    """Base class for all errors raised by this package."""


class SplitwiseApiError(SplitwiseMcpError):
    """The Splitwise API rejected a request.

    Raised for non-success HTTP statuses and for mutation responses whose
    ``errors`` object is not empty.
    """

    def __init__(self, status_code: int, errors: dict[str, Any]):
        self.status_code = status_code
        self.errors = errors
        super().__init__(f"API error ({status_code}): {errors}")


class SplitwiseTransportError(SplitwiseMcpError):
    """The request never produced a response (connection, timeout, TLS)."""


class SplitwiseDecodeError(SplitwiseMcpError):
    """A successful response could not be parsed into the expected shape."""


class InvalidQueryError(SplitwiseMcpError, ValueError):
    """An expense query was rejected before any network call was made."""


class ExpenseFetchError(SplitwiseMcpError):
    """Fetching one batch of expenses failed.

    The offset is kept so the caller can resume from where the query stopped.
    """

    def __init__(self, offset: int, cause: BaseException):
        self.offset = offset
        super().__init__(f"Failed to fetch batch at offset {offset}: {cause}")
