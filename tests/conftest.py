from __future__ import annotations

from typing import Any

import pytest

from plain_api.config import interpolation
from plain_api.http import HttpResponse
from plain_api.transport import Transport


class RecordingTransport(Transport):
    """Fake transport recording each per-method call it receives."""

    def __init__(self, response: HttpResponse | None = None, error: BaseException | None = None):
        self.calls: list[tuple[Any, ...]] = []
        self.response = response or HttpResponse(status_code=200, data=None, headers={})
        self.error = error

    async def request(self, method, url, **options):  # pragma: no cover - not reached
        raise AssertionError("per-method calls are expected")

    async def _reply(self, call: tuple[Any, ...]) -> HttpResponse:
        self.calls.append(call)
        if self.error is not None:
            raise self.error
        return self.response

    async def get(self, url, **options):
        return await self._reply(("get", url, options))

    async def delete(self, url, **options):
        return await self._reply(("delete", url, options))

    async def post(self, url, payload=None, **options):
        return await self._reply(("post", url, payload, options))

    async def put(self, url, payload=None, **options):
        return await self._reply(("put", url, payload, options))

    async def patch(self, url, payload=None, **options):
        return await self._reply(("patch", url, payload, options))


@pytest.fixture(autouse=True)
def _reset_interpolation_pattern():
    yield
    interpolation.reset()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def respond_with():
    def build(status_code: int = 200, data: Any = None, error: BaseException | None = None):
        return RecordingTransport(
            response=HttpResponse(status_code=status_code, data=data, headers={}), error=error
        )

    return build
