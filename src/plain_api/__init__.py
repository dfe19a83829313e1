"""Declarative HTTP resource calls."""
from .config import (
    ResourceOptions,
    TransportConfig,
    get_default_interpolation_pattern,
    set_default_interpolation_pattern,
)
from .exceptions import PlainApiError
from .parsers import pluck, raise_on_failure
from .resource import Resource, create_resource, create_resource_factory
from .transport import SessionTransport, Transport

__all__ = [
    "create_resource",
    "create_resource_factory",
    "Resource",
    "ResourceOptions",
    "TransportConfig",
    "Transport",
    "SessionTransport",
    "PlainApiError",
    "pluck",
    "raise_on_failure",
    "set_default_interpolation_pattern",
    "get_default_interpolation_pattern",
]
