"""Response parser chain and stock parsers."""

from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .config import Parser, normalize_parsers
from .exceptions import ResponseError

if TYPE_CHECKING:  # pragma: no cover - import-time guard
    from .config import ResourceOptions

_PARSER_ARGS = 5


def _read_only(self: Any, *args: Any, **kwargs: Any) -> Any:
    raise TypeError(f"{type(self).__name__} response body is read-only")


class FrozenList(list):
    """List whose contents cannot be changed in place.

    Operators that build a new list (``+``, slicing, ``copy``) return a plain
    `list`.
    """

    __slots__ = ()

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _read_only
    append = extend = insert = pop = remove = clear = sort = reverse = _read_only

    def copy(self) -> list[Any]:
        return list(self)

    def __reduce__(self) -> tuple[Any, ...]:
        return (list, (list(self),))


class FrozenDict(dict):
    """Dict whose contents cannot be changed in place.

    ``|`` and ``copy`` return a plain `dict`.
    """

    __slots__ = ()

    __setitem__ = __delitem__ = __ior__ = _read_only
    pop = popitem = clear = update = setdefault = _read_only

    def copy(self) -> dict[str, Any]:
        return dict(self)

    def __reduce__(self) -> tuple[Any, ...]:
        return (dict, (dict(self),))


def freeze(body: Any) -> Any:
    """Return a read-only shallow copy of a list or dict body.

    Nested values are shared with the original body.
    """

    if isinstance(body, dict):
        return FrozenDict(body)
    if isinstance(body, list):
        return FrozenList(body)
    return body


def _arity(parser: Parser) -> int:
    if inspect.isclass(parser):
        # Types such as dict or list take the body alone.
        return 1
    try:
        signature = inspect.signature(parser)
    except (TypeError, ValueError):
        return _PARSER_ARGS
    count = 0
    for parameter in signature.parameters.values():
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            return _PARSER_ARGS
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return max(1, min(count, _PARSER_ARGS))


async def invoke_parsers(
    parsers: Parser | Sequence[Parser] | None,
    body: Any,
    is_failure: bool,
    payload: Mapping[str, Any] | None,
    options: ResourceOptions,
    status_code: int | None,
) -> Any:
    """Fold ``body`` through ``parsers`` from left to right.

    Parsers declaring fewer than five positional parameters receive only the
    leading arguments. Awaitable results are awaited before the next parser
    runs.
    """

    chain = normalize_parsers(parsers)
    if not chain:
        return body
    current = freeze(body)
    args = (is_failure, payload, options, status_code)
    for parser in chain:
        result = parser(current, *args[: _arity(parser) - 1])
        if inspect.isawaitable(result):
            result = await result
        current = result
    return current


def raise_on_failure(
    body: Any,
    is_failure: bool,
    payload: Mapping[str, Any] | None = None,
    options: ResourceOptions | None = None,
    status_code: int | None = None,
) -> Any:
    """Raise `ResponseError` for failure responses, pass successes through."""

    if not is_failure:
        return body
    message = None
    if isinstance(body, Mapping):
        message = body.get("message") or body.get("msg") or body.get("error")
    if not message:
        message = f"Request failed with status {status_code}"
    raise ResponseError(str(message), status_code=status_code, details=body)


def pluck(*path: str | int) -> Parser:
    """Build a parser returning the value found by walking ``path`` into the body."""

    def parser(body: Any) -> Any:
        current = body
        for key in path:
            if isinstance(current, Mapping):
                current = current[key]
            elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
                current = current[int(key)]
            else:
                raise ResponseError(f"Cannot read {key!r} from {type(current).__name__} body")
        return current

    return parser
