"""HTTP transports for plain-api resources."""
from __future__ import annotations

import atexit
from functools import lru_cache

from .base import Transport
from .session import SessionTransport


@lru_cache(maxsize=None)
def default_transport() -> Transport:
    """Return the shared transport used by resources created without one.

    Every such resource in the process uses this one `SessionTransport`.
    Calls without credentials each get their own session. Credentialed calls
    share one session and cookie jar, and they run one at a time. The
    transport is closed at interpreter exit.
    """

    transport = SessionTransport()
    atexit.register(transport.close)
    return transport


__all__ = ["Transport", "SessionTransport", "default_transport"]
