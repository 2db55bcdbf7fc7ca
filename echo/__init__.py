"""Fluent HTTP request builder returning status-aware awaitables."""

from .builder import EchoBuilder
from .client import HttpClient
from .configs import EchoConfig, echo_config
from .exceptions import EchoError, EchoException, InvalidArgumentError, PreconditionFailedError
from .ext_logging import init_logging
from .middleware import headers_middleware, logging_middleware, timeout_middleware
from .models import EchoOptions, EchoRequest, EchoResponse, HttpMethod
from .promise import EchoPromise, EchoPromiseStatus
from .types import Middleware, NextFn, Transport


def echo(client: Transport | None = None) -> EchoBuilder:
    """Create a builder seeded with ECHO_BASE_URL and ECHO_DEFAULT_HEADERS."""
    options = EchoOptions(
        base_url=echo_config.BASE_URL,
        headers=dict(echo_config.DEFAULT_HEADERS),
    )
    return EchoBuilder(options, client=client)


__all__ = [
    "echo",
    "EchoBuilder",
    "EchoPromise",
    "EchoPromiseStatus",
    "EchoOptions",
    "EchoRequest",
    "EchoResponse",
    "HttpMethod",
    "HttpClient",
    "EchoConfig",
    "echo_config",
    "init_logging",
    "EchoException",
    "EchoError",
    "InvalidArgumentError",
    "PreconditionFailedError",
    "Middleware",
    "NextFn",
    "Transport",
    "timeout_middleware",
    "logging_middleware",
    "headers_middleware",
]
