"""Custom exception hierarchy for plain-api."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .http import HttpResponse


class PlainApiError(RuntimeError):
    """Base error for plain-api failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class UnsupportedMethodError(PlainApiError):
    """Raised when a resource is called with an HTTP method it cannot dispatch."""


class HTTPStatusError(PlainApiError):
    """Raised by transports when the remote endpoint replied with a failure status."""

    def __init__(self, message: str, *, response: HttpResponse) -> None:
        super().__init__(message, status_code=response.status_code, details=response.data)
        self.response = response


class ResponseError(PlainApiError):
    """Raised by parsers that turn a failure body into an error."""
