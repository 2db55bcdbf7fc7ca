import logging

from .models import EchoRequest, EchoResponse
from .types import Middleware, NextFn


def timeout_middleware(timeout: float) -> Middleware:
    """Pin the transport timeout for every request passing through."""

    async def middleware(request: EchoRequest, next: NextFn) -> EchoResponse:
        return await next(request.with_timeout(timeout))

    return middleware


def logging_middleware(logger: logging.Logger | None = None) -> Middleware:
    log = logger or logging.getLogger(__name__)

    async def middleware(request: EchoRequest, next: NextFn) -> EchoResponse:
        if request.params:
            log.info(f"-> {request.method} {request.url} params={request.params}")
        else:
            log.info(f"-> {request.method} {request.url}")
        try:
            response = await next(request)
        except Exception as e:
            log.warning(f"<- {request.method} {request.url} failed: {e!r}")
            raise
        log.info(f"<- {response.status_code} {response.reason_phrase} ({response.latency_ms}ms)")
        return response

    return middleware


def headers_middleware(**headers: str) -> Middleware:
    """Add headers the request does not set itself; request headers win."""

    async def middleware(request: EchoRequest, next: NextFn) -> EchoResponse:
        lowered = {name.lower() for name in request.headers}
        missing = {name: value for name, value in headers.items() if name.lower() not in lowered}
        return await next(request.with_headers(**missing))

    return middleware
