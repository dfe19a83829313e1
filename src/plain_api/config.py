"""Configuration helpers for plain-api resources and transports."""

from __future__ import annotations

import re
import warnings
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any

DEFAULT_INTERPOLATION_PATTERN = re.compile(r"\{\{(\w+)\}\}")

Parser = Callable[..., Any]
Pattern = re.Pattern[str]


def _identity(value: Any) -> Any:
    return value


class InterpolationSettings:
    """Process-wide holder for the default URL placeholder pattern.

    Resources read the cell once, when their options are resolved, so a new
    default only applies to resources created after it is set.
    """

    __slots__ = ("_pattern",)

    def __init__(self, pattern: Pattern = DEFAULT_INTERPOLATION_PATTERN) -> None:
        self._pattern = pattern

    def get(self) -> Pattern:
        return self._pattern

    def set(self, pattern: str | Pattern) -> None:
        self._pattern = compile_pattern(pattern)

    def reset(self) -> None:
        self._pattern = DEFAULT_INTERPOLATION_PATTERN


interpolation = InterpolationSettings()


def compile_pattern(pattern: str | Pattern) -> Pattern:
    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
    if compiled.groups < 1:
        raise ValueError("Interpolation pattern must capture the placeholder name in a group.")
    return compiled


def set_default_interpolation_pattern(pattern: str | Pattern) -> None:
    """Replace the default placeholder pattern for resources created from now on.

    Deprecated: pass ``interpolation_pattern`` to `create_resource_factory`
    instead.
    """

    warnings.warn(
        "set_default_interpolation_pattern is deprecated; pass interpolation_pattern "
        "to create_resource_factory instead.",
        DeprecationWarning,
        stacklevel=2,
    )
    interpolation.set(pattern)


def get_default_interpolation_pattern() -> Pattern:
    return interpolation.get()


@dataclass(frozen=True, slots=True)
class ResourceOptions:
    """Per-resource request and response shaping options.

    ``None`` marks a field as unset so that merging can tell an explicit
    override apart from a default. `resolve` fills in the defaults.
    """

    interpolation_pattern: Pattern | None = None
    transform_payload: Callable[[dict[str, Any]], Any] | None = None
    transform_headers: Callable[[dict[str, Any]], Any] | None = None
    input_map: Mapping[str, str] | None = None
    headers_map: Mapping[str, str] | None = None
    with_credentials: bool | None = None
    parsers: tuple[Parser, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if isinstance(self.interpolation_pattern, str):
            object.__setattr__(
                self, "interpolation_pattern", compile_pattern(self.interpolation_pattern)
            )
        for name in ("input_map", "headers_map"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        object.__setattr__(self, "parsers", normalize_parsers(self.parsers))

    @classmethod
    def coerce(cls, value: ResourceOptions | Mapping[str, Any] | None) -> ResourceOptions:
        if value is None:
            return cls()
        if isinstance(value, ResourceOptions):
            return value
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(value) - known)
        if unknown:
            raise TypeError(f"Unknown resource option(s): {', '.join(unknown)}")
        return cls(**value)

    def resolve(self) -> ResourceOptions:
        """Return a copy with every unset field replaced by its default."""

        return replace(
            self,
            interpolation_pattern=self.interpolation_pattern or interpolation.get(),
            transform_payload=self.transform_payload or _identity,
            transform_headers=self.transform_headers or _identity,
            with_credentials=bool(self.with_credentials),
        )


def normalize_parsers(parsers: Parser | Iterable[Parser] | None) -> tuple[Parser, ...]:
    if parsers is None:
        return ()
    if callable(parsers):
        return (parsers,)
    return tuple(parsers)


def merge_options(*layers: ResourceOptions | Mapping[str, Any] | None) -> ResourceOptions:
    """Merge option layers from least to most specific.

    Scalar fields take the last value that is set. Parsers are concatenated in
    layer order.
    """

    merged: dict[str, Any] = {}
    parsers: list[Parser] = []
    for layer in layers:
        options = ResourceOptions.coerce(layer)
        for item in fields(ResourceOptions):
            if item.name == "parsers":
                continue
            value = getattr(options, item.name)
            if value is not None:
                merged[item.name] = value
        parsers.extend(options.parsers)
    return ResourceOptions(parsers=tuple(parsers), **merged)


@dataclass(slots=True)
class TransportConfig:
    """Typed configuration for `SessionTransport`."""

    timeout: float = 30.0
    verify_ssl: bool | str = True
    default_headers: Mapping[str, str] | None = None

    def resolved_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Accept": "application/json"}
        if self.default_headers:
            headers.update(self.default_headers)
        return headers
