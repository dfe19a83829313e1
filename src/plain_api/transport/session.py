"""`requests`-backed transport."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Mapping
from typing import Any

import requests
import urllib3
from requests.auth import AuthBase
from urllib3.exceptions import InsecureRequestWarning

from ..config import TransportConfig
from ..http import HttpResponse, ensure_success, from_requests
from .base import Transport

logger = logging.getLogger(__name__)


class SessionTransport(Transport):
    """Run requests through `requests` on a worker thread.

    Calls made with ``with_credentials`` go through the long-lived session,
    which carries ``auth``, the session's own auth, headers and cookie jar.
    Those calls are serialized by a lock because the cookie jar is shared.
    Calls made without credentials use a fresh session that ignores
    `.netrc`, so nothing from the long-lived session leaks into them.
    Adapters mounted on an injected session only serve credentialed calls.
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        *,
        session: requests.Session | None = None,
        auth: AuthBase | tuple[str, str] | None = None,
    ) -> None:
        self.config = config or TransportConfig()
        self._session = session or requests.Session()
        self._auth = auth
        self._lock = threading.Lock()
        self._suppress_insecure_warning_if_needed()

    # Context manager helpers -------------------------------------------------
    def __enter__(self) -> SessionTransport:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # pragma: no cover - passthrough
        self.close()

    # Public API --------------------------------------------------------------
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
        return await asyncio.to_thread(
            self._send,
            method,
            url,
            params=params,
            json_payload=json_payload,
            headers=headers,
            with_credentials=with_credentials,
        )

    def close(self) -> None:
        self._session.close()

    # Internal helpers -------------------------------------------------------
    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, Any] | None,
        json_payload: Any | None,
        headers: Mapping[str, Any] | None,
        with_credentials: bool,
    ) -> HttpResponse:
        request_kwargs: dict[str, Any] = {
            "method": method,
            "url": url,
            "params": params,
            "headers": self._prepare_headers(headers),
            "json": json_payload,
            "timeout": self.config.timeout,
        }
        if with_credentials:
            with self._lock:
                response = self._session.request(
                    auth=self._auth, verify=self.config.verify_ssl, **request_kwargs
                )
        else:
            response = self._send_anonymous(request_kwargs)
        logger.debug("%s %s -> %s", method, url, response.status_code)
        return ensure_success(from_requests(response))

    def _send_anonymous(self, request_kwargs: dict[str, Any]) -> requests.Response:
        # Environment proxies and CA bundles still apply; .netrc does not.
        settings = self._session.merge_environment_settings(
            request_kwargs["url"], {}, None, self.config.verify_ssl, None
        )
        with requests.Session() as session:
            session.trust_env = False
            return session.request(
                proxies=settings["proxies"], verify=settings["verify"], **request_kwargs
            )

    def _prepare_headers(self, headers: Mapping[str, Any] | None) -> dict[str, str]:
        merged = self.config.resolved_headers()
        if headers:
            merged.update({name: str(value) for name, value in headers.items()})
        return merged

    def _suppress_insecure_warning_if_needed(self) -> None:
        if isinstance(self.config.verify_ssl, bool) and not self.config.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)
