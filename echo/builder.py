import asyncio
import logging
from dataclasses import replace
from typing import Any, Generic, TypeVar

from .client import HttpClient
from .exceptions import EchoError
from .ext_logging import trace_id_generator, trace_id_var
from .models import EchoOptions, EchoRequest, EchoResponse, HttpMethod, serialize_body
from .promise import EchoPromise
from .types import Transport

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EchoBuilder(Generic[T]):
    """Fluent builder for a single HTTP request.

    Every chain method returns a new builder and leaves the receiver as it
    was, so a partially configured builder can be reused as a template::

        users = EchoBuilder().base_url("https://api.example.com").header("Accept", "application/json")
        promise = users.get("/users/:id").path("id", 42).execute()

    ``execute()`` has to be called from a running event loop. It returns an
    EchoPromise right away; transport failures and non-2xx responses end up
    in the promise, never raised from ``execute()`` itself.
    """

    def __init__(self, options: EchoOptions | None = None, client: Transport | None = None):
        options = options or EchoOptions()
        self._options = replace(
            options,
            headers=dict(options.headers),
            parameters=dict(options.parameters),
        )
        self._client = client

    def _next(self, options: EchoOptions) -> "EchoBuilder[T]":
        return self.__class__(options, client=self._client)

    @property
    def request_options(self) -> EchoOptions:
        return self._options

    def base_url(self, base_url: str) -> "EchoBuilder[T]":
        return self._next(self._options.with_base_url(base_url))

    def url(self, url: str) -> "EchoBuilder[T]":
        return self._next(self._options.with_url(url))

    def _verb(self, method: HttpMethod, url: str) -> "EchoBuilder[T]":
        return self._next(replace(self._options, url=url, method=method))

    def get(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.GET, url)

    def post(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.POST, url)

    def patch(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.PATCH, url)

    def put(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.PUT, url)

    def delete(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.DELETE, url)

    def head(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.HEAD, url)

    def options(self, url: str) -> "EchoBuilder[T]":
        return self._verb(HttpMethod.OPTIONS, url)

    def method(self, method: HttpMethod | str) -> "EchoBuilder[T]":
        """Set the method; raises InvalidArgumentError for anything but the seven supported verbs."""
        return self._next(self._options.with_method(method))

    def header(self, name: str, value: str) -> "EchoBuilder[T]":
        return self._next(self._options.with_headers({name: value}))

    def headers(self, headers: dict[str, str]) -> "EchoBuilder[T]":
        return self._next(self._options.with_headers(headers))

    def parameter(self, name: str, value: Any) -> "EchoBuilder[T]":
        return self._next(self._options.with_parameters({name: value}))

    def parameters(self, parameters: dict[str, Any]) -> "EchoBuilder[T]":
        return self._next(self._options.with_parameters(parameters))

    def query(self, name: str, value: Any) -> "EchoBuilder[T]":
        return self.parameter(name, value)

    def queries(self, queries: dict[str, Any]) -> "EchoBuilder[T]":
        return self.parameters(queries)

    def path(self, name: str, value: Any) -> "EchoBuilder[T]":
        """Replace the ``:name`` and ``{name}`` placeholders of the url with ``value``."""
        return self._next(self._options.with_path(name, value))

    def body(self, body: Any) -> "EchoBuilder[T]":
        return self._next(self._options.with_body(body))

    def _prepare_request(self) -> EchoRequest:
        options = self._options
        return EchoRequest(
            method=str(options.method or HttpMethod.GET),
            url=options.full_url,
            headers=dict(options.headers),
            params=dict(options.parameters),
        )

    def _attach_body(self, request: EchoRequest) -> EchoRequest:
        body = self._options.body
        try:
            content = serialize_body(body)
        except (TypeError, ValueError) as e:
            raise EchoError(f"Could not serialize request body: {e}", request=request) from e
        if body is not None and not isinstance(body, bytes):
            if not any(name.lower() == "content-type" for name in request.headers):
                request = request.with_headers(**{"Content-Type": "application/json"})
        return request.with_body(content)

    def build(self) -> EchoRequest:
        """Assemble the request ``execute()`` would dispatch, without dispatching it.

        Raises EchoError when the body cannot be serialized.
        """
        return self._attach_body(self._prepare_request())

    def execute(self) -> EchoPromise[T]:
        # Fail before any coroutine exists when there is no loop to run it on
        asyncio.get_running_loop()
        request = self._prepare_request()
        try:
            request = self._attach_body(request)
        except EchoError as e:
            logger.warning(f"{request.method} {request.url}: {e.detail}")
            return EchoPromise(request, self._raise(e))
        return EchoPromise(request, self._dispatch(request))

    @staticmethod
    async def _raise(error: EchoError) -> EchoResponse[T]:
        raise error

    async def _dispatch(self, request: EchoRequest) -> EchoResponse[T]:
        # Runs in its own task, the trace id does not leak to the caller's context
        trace_id_var.set(trace_id_generator())
        logger.debug(f"dispatching {request.method} {request.url}")
        try:
            if self._client is not None:
                response = await self._client(request)
            else:
                async with HttpClient() as client:
                    response = await client.send(request)
        except EchoError:
            raise
        except Exception as e:
            logger.warning(f"{request.method} {request.url} failed: {e!r}")
            raise EchoError(f"Request failed: {e}", request=request) from e

        if not response.ok:
            logger.warning(f"{request.method} {request.url} returned {response.status_code}")
            raise EchoError(
                f"Request failed with status code {response.status_code}",
                request=request,
                response=response,
            )
        return response
