"""Declarative HTTP resources."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .config import ResourceOptions, merge_options
from .exceptions import UnsupportedMethodError
from .http import HttpResponse, response_from_error
from .mapping import build_headers, build_payload, interpolate
from .parsers import invoke_parsers
from .transport import Transport, default_transport

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("get", "post", "put", "patch", "delete")

OptionsLike = ResourceOptions | Mapping[str, Any] | None
ResourceFactory = Callable[..., "Resource"]


@dataclass(frozen=True, slots=True)
class Resource:
    """One API endpoint bound to a method, a URL template and resolved options.

    Resources hold no per-call state; `call` may be awaited any number of
    times, concurrently or not.
    """

    method: str
    api_url: str
    options: ResourceOptions
    transport: Transport | None = field(default=None, repr=False, compare=False)

    # Public API --------------------------------------------------------------
    def build_url(self, url_params: Mapping[str, Any] | None = None) -> str:
        return interpolate(self.api_url, url_params, self.options.interpolation_pattern)

    def get_properties(self) -> dict[str, Any]:
        return {"api_url": self.api_url, "method": self.method, "options": self.options}

    async def call(self, payload: Mapping[str, Any] | None = None) -> Any:
        """Send the request described by this resource and parse the response.

        Failure responses are handed to the parsers with ``is_failure=True``.
        Errors raised without a response (connection refused, timeouts) are
        propagated as-is and no parser runs.
        """

        method = self.method.lower()
        if method not in SUPPORTED_METHODS:
            raise UnsupportedMethodError(f"Invalid method {self.method}")

        options = self.options
        url = self.build_url(payload)
        wire_payload = build_payload(options.input_map, payload, options.transform_payload)
        headers = build_headers(options.headers_map, payload, options.transform_headers)

        request_options: dict[str, Any] = {}
        if headers:
            request_options["headers"] = headers
        if options.with_credentials:
            request_options["with_credentials"] = True

        self._log_request(method, url)
        try:
            response = await self._dispatch(method, url, wire_payload, request_options)
        except Exception as exc:
            failure = response_from_error(exc)
            if failure is None:
                raise
            logger.debug(
                "plain-api %s %s failed with status %s; running parsers",
                method.upper(),
                url,
                failure.status_code,
            )
            return await invoke_parsers(
                options.parsers, failure.data, True, payload, options, failure.status_code
            )
        return await invoke_parsers(
            options.parsers, response.data, False, payload, options, response.status_code
        )

    # Internal helpers -------------------------------------------------------
    async def _dispatch(
        self,
        method: str,
        url: str,
        payload: dict[str, Any] | None,
        request_options: dict[str, Any],
    ) -> HttpResponse:
        transport = self.transport or default_transport()
        if method == "get":
            if payload is not None:
                request_options = {**request_options, "params": payload}
            return await transport.get(url, **request_options)
        if method == "delete":
            # DELETE never carries a payload, even when input_map is declared.
            return await transport.delete(url, **request_options)
        send = getattr(transport, method)
        return await send(url, payload, **request_options)

    @staticmethod
    def _log_request(method: str, url: str) -> None:
        logger.info("plain-api request %s %s", method.upper(), url)


def create_resource(
    method: str,
    api_url: str,
    options: OptionsLike = None,
    *,
    transport: Transport | None = None,
    **overrides: Any,
) -> Resource:
    """Describe an endpoint once; call it later with different payloads.

    Options may be given as a `ResourceOptions`, a mapping, keyword
    overrides, or any mix of those (keywords win).
    """

    resolved = merge_options(options, overrides).resolve()
    return Resource(method=method, api_url=api_url, options=resolved, transport=transport)


def create_resource_factory(
    default_options: OptionsLike = None,
    *,
    transport: Transport | None = None,
    **overrides: Any,
) -> ResourceFactory:
    """Return a `create_resource` variant layering ``default_options`` underneath.

    Scalar options set on a resource override the factory defaults. Parsers
    are concatenated, factory parsers first.
    """

    defaults = merge_options(default_options, overrides)
    factory_transport = transport

    def factory(
        method: str,
        api_url: str,
        options: OptionsLike = None,
        *,
        transport: Transport | None = None,
        **resource_overrides: Any,
    ) -> Resource:
        resolved = merge_options(defaults, options, resource_overrides).resolve()
        return Resource(
            method=method,
            api_url=api_url,
            options=resolved,
            transport=transport or factory_transport,
        )

    return factory
