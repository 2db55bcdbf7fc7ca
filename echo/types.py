from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import EchoRequest, EchoResponse

NextFn = Callable[["EchoRequest"], Awaitable["EchoResponse"]]
Middleware = Callable[["EchoRequest", NextFn], Awaitable["EchoResponse"]]

Transport = Callable[["EchoRequest"], Awaitable["EchoResponse"]]
