import json
import time
from dataclasses import replace
from typing import Any

import httpx

from .configs import echo_config
from .models import EchoRequest, EchoResponse, decode_payload
from .types import Middleware


class HttpClient:
    """Transport used by EchoBuilder.execute(); one instance may serve many requests.

    Returns every response regardless of status code. Deciding what counts as
    a failure is left to the caller.
    """

    def __init__(
        self,
        middlewares: list[Middleware] | None = None,
        default_timeout: float | None = None,
        default_headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._middlewares = middlewares or []
        self._default_timeout = default_timeout or echo_config.DEFAULT_TIMEOUT
        self._default_headers = default_headers or {}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._default_timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *_args: Any) -> None:
        await self.close()

    def _prepare_body(self, body: bytes | str | dict | list | None) -> bytes:
        if body is None:
            return b""
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        return json.dumps(body).encode("utf-8")

    def _merge_headers(self, headers: dict[str, str] | None) -> dict[str, str]:
        merged = dict(self._default_headers)
        if headers:
            merged.update(headers)
        return merged

    async def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        body: bytes | str | dict | list | None = None,
        timeout: float | None = None,
    ) -> EchoResponse:
        req = EchoRequest(
            method=method,
            url=url,
            headers=headers or {},
            params=params or {},
            body=self._prepare_body(body),
            timeout=timeout,
        )
        return await self.send(req)

    async def send(self, request: EchoRequest) -> EchoResponse:
        request = replace(
            request,
            headers=self._merge_headers(request.headers),
            timeout=request.timeout or self._default_timeout,
        )
        if self._middlewares:
            return await self._execute_with_middleware(request, 0)
        return await self._do_request(request)

    async def __call__(self, request: EchoRequest) -> EchoResponse:
        return await self.send(request)

    async def _execute_with_middleware(self, request: EchoRequest, index: int) -> EchoResponse:
        if index >= len(self._middlewares):
            return await self._do_request(request)

        middleware = self._middlewares[index]

        async def next_fn(req: EchoRequest) -> EchoResponse:
            return await self._execute_with_middleware(req, index + 1)

        return await middleware(request, next_fn)

    async def _do_request(self, request: EchoRequest) -> EchoResponse:
        client = await self._ensure_client()
        start_time = time.time()

        http_response = await client.request(
            method=request.method,
            url=request.url,
            headers=request.headers,
            params=request.params or None,
            content=request.body,
            timeout=request.timeout,
        )

        latency_ms = int((time.time() - start_time) * 1000)

        return EchoResponse(
            status_code=http_response.status_code,
            reason_phrase=http_response.reason_phrase,
            headers=dict(http_response.headers),
            body=http_response.content,
            data=decode_payload(http_response.content),
            latency_ms=latency_ms,
            request=request,
        )

    async def get(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("DELETE", url, **kwargs)

    async def head(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("HEAD", url, **kwargs)

    async def options(self, url: str, **kwargs: Any) -> EchoResponse:
        return await self.request("OPTIONS", url, **kwargs)
