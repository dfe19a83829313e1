"""HTTP response helpers shared by transports and resources."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from requests import Response

from .exceptions import HTTPStatusError


@dataclass(slots=True)
class HttpResponse:
    """Typed response wrapper with helper accessors."""

    status_code: int
    data: Any
    headers: Mapping[str, str]

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def decode_body(response: Response) -> Any:
    """Return the JSON body when there is one, otherwise the raw text."""

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def from_requests(response: Response) -> HttpResponse:
    return HttpResponse(
        status_code=response.status_code,
        data=decode_body(response),
        headers=response.headers,
    )


def ensure_success(response: HttpResponse) -> HttpResponse:
    """Raise `HTTPStatusError` if the response signals a failure."""

    if response.ok:
        return response
    message = f"API error {response.status_code}: {str(response.data)[:200]}"
    raise HTTPStatusError(message, response=response)


def response_from_error(exc: BaseException) -> HttpResponse | None:
    """Extract the failure response attached to a transport error, if any.

    Transports signal "the endpoint replied with a failure status" by raising
    an exception with a non-empty ``response`` attribute. Both our own
    `HTTPStatusError` and `requests.HTTPError` follow that convention.
    """

    response = getattr(exc, "response", None)
    if response is None:
        return None
    if isinstance(response, HttpResponse):
        return response
    if isinstance(response, Response):
        return from_requests(response)
    return None
