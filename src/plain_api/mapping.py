"""Pure helpers turning an invocation payload into URL, body and headers."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import quote

from .config import Pattern

# Characters left unescaped when a value is substituted into the URL.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_component(value: Any) -> str:
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def interpolate(template: str, params: Mapping[str, Any] | None, pattern: Pattern) -> str:
    """Substitute placeholders in ``template`` with percent-encoded params.

    Placeholders whose name is not a key of ``params`` are left untouched.
    Literal braces cannot be escaped.
    """

    if not params:
        return template

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name in params:
            return encode_component(params[name])
        return match.group(0)

    return pattern.sub(substitute, template)


def map_fields(
    field_map: Mapping[str, str] | None,
    payload: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Rename the logical fields present in ``payload`` to their wire names."""

    if not field_map or payload is None:
        return {}
    return {wire: payload[logical] for logical, wire in field_map.items() if logical in payload}


def _shape(
    field_map: Mapping[str, str] | None,
    payload: Mapping[str, Any] | None,
    transform: Callable[[dict[str, Any]], Any],
) -> dict[str, Any] | None:
    shaped = transform(map_fields(field_map, payload))
    if not shaped:
        return None
    return dict(shaped)


def build_payload(
    input_map: Mapping[str, str] | None,
    payload: Mapping[str, Any] | None,
    transform: Callable[[dict[str, Any]], Any],
) -> dict[str, Any] | None:
    """Return the wire payload, or ``None`` when nothing is left to send."""

    return _shape(input_map, payload, transform)


def build_headers(
    headers_map: Mapping[str, str] | None,
    payload: Mapping[str, Any] | None,
    transform: Callable[[dict[str, Any]], Any],
) -> dict[str, Any] | None:
    """Return the mapped request headers, or ``None`` when there are none."""

    return _shape(headers_map, payload, transform)
