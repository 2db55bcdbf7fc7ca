import asyncio
import logging
from collections.abc import Awaitable, Callable, Generator
from enum import StrEnum
from typing import Any, Generic, TypeVar

from .exceptions import PreconditionFailedError
from .models import EchoRequest, EchoResponse

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EchoPromiseStatus(StrEnum):
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class EchoPromise(Generic[T]):
    """Awaitable result of EchoBuilder.execute() with synchronous status inspection.

    The promise is LOADING until the dispatched request settles, then moves
    once to SUCCESS (``response`` and ``data`` set) or ERROR (``error`` set)
    and never changes again. Awaiting it returns ``data`` or raises ``error``.

    Must be created inside a running event loop.
    """

    def __init__(self, request: EchoRequest, dispatch: Awaitable[EchoResponse[T]]):
        self._request = request
        self._status = EchoPromiseStatus.LOADING
        self._response: EchoResponse[T] | None = None
        self._data: T | None = None
        self._error: BaseException | None = None
        self._task = asyncio.get_running_loop().create_task(self._run(dispatch))
        self._task.add_done_callback(self._on_done)

    async def _run(self, dispatch: Awaitable[EchoResponse[T]]) -> T | None:
        try:
            response = await dispatch
        except BaseException as e:
            self._reject(e)
            raise
        self._fulfil(response)
        return response.data

    def _fulfil(self, response: EchoResponse[T]) -> None:
        if self._status is not EchoPromiseStatus.LOADING:
            return
        self._response = response
        self._data = response.data
        self._status = EchoPromiseStatus.SUCCESS

    def _reject(self, error: BaseException) -> None:
        if self._status is not EchoPromiseStatus.LOADING:
            return
        self._error = error
        self._status = EchoPromiseStatus.ERROR

    def _on_done(self, task: "asyncio.Task[T | None]") -> None:
        # Cancelled before the first step, _run never saw it
        if task.cancelled():
            self._reject(asyncio.CancelledError())
            return
        # Marks the exception as retrieved; it stays reachable through ``error``
        error = task.exception()
        if error is not None:
            logger.debug(f"{self._request.method} {self._request.url} settled with {error!r}")

    def __await__(self) -> Generator[Any, None, T | None]:
        return self._task.__await__()

    def __repr__(self) -> str:
        return f"<EchoPromise {self._request.method} {self._request.url} [{self._status}]>"

    @property
    def status(self) -> EchoPromiseStatus:
        return self._status

    @property
    def request(self) -> EchoRequest:
        return self._request

    @property
    def response(self) -> EchoResponse[T] | None:
        return self._response

    @property
    def data(self) -> T | None:
        return self._data

    @property
    def error(self) -> BaseException | None:
        return self._error

    def is_loading(self) -> bool:
        return self._status is EchoPromiseStatus.LOADING

    def is_success(self) -> bool:
        return self._status is EchoPromiseStatus.SUCCESS

    def is_error(self) -> bool:
        return self._status is EchoPromiseStatus.ERROR

    def done(self) -> bool:
        return self._status is not EchoPromiseStatus.LOADING

    def add_done_callback(self, fn: Callable[["EchoPromise[T]"], Any]) -> None:
        """Call ``fn(self)`` once the promise has settled.

        Runs through the event loop, after the status is final, also when the
        promise has already settled.
        """
        self._task.add_done_callback(lambda _task: fn(self))

    def require_data(self) -> T:
        if self._data is None:
            raise PreconditionFailedError("Data is not available.")
        return self._data

    def require_response(self) -> EchoResponse[T]:
        if self._response is None:
            raise PreconditionFailedError("Response is not available.")
        return self._response

    def require_error(self) -> BaseException:
        if self._error is None:
            raise PreconditionFailedError("Error is not available.")
        return self._error
