"""Base abstraction for HTTP transports."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from ..http import HttpResponse


class Transport(ABC):
    """Interface each HTTP transport must implement.

    A transport returns an `HttpResponse` for 2xx replies. For any other
    reply it raises an exception whose ``response`` attribute holds the
    failure response. When no response was received at all it raises its own
    error with no response attached.
    """

    @abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_payload: Any | None = None,
        headers: Mapping[str, Any] | None = None,
        with_credentials: bool = False,
    ) -> HttpResponse:
        """Send a single request and return the parsed response envelope."""

    async def get(self, url: str, **options: Any) -> HttpResponse:
        return await self.request("GET", url, **options)

    async def delete(self, url: str, **options: Any) -> HttpResponse:
        return await self.request("DELETE", url, **options)

    async def post(self, url: str, payload: Any | None = None, **options: Any) -> HttpResponse:
        return await self.request("POST", url, json_payload=payload, **options)

    async def put(self, url: str, payload: Any | None = None, **options: Any) -> HttpResponse:
        return await self.request("PUT", url, json_payload=payload, **options)

    async def patch(self, url: str, payload: Any | None = None, **options: Any) -> HttpResponse:
        return await self.request("PATCH", url, json_payload=payload, **options)

    def close(self) -> None:
        """Release pooled connections, if the transport holds any."""
