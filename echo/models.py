import json
import re
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Generic, TypeVar

from .exceptions import InvalidArgumentError

T = TypeVar("T")

_PLACEHOLDER_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")


class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"

    @classmethod
    def parse(cls, value: "HttpMethod | str") -> "HttpMethod":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                pass
        raise InvalidArgumentError(f"Unsupported HTTP method: {value!r}")


def substitute_path(url: str, name: str, value: Any) -> str:
    """Replace every ``:name`` and ``{name}`` placeholder in ``url``."""
    if not isinstance(name, str) or not _PLACEHOLDER_NAME.fullmatch(name):
        raise InvalidArgumentError(f"Invalid path placeholder name: {name!r}")
    escaped = re.escape(name)
    pattern = re.compile(rf":{escaped}(?![A-Za-z0-9_-])|\{{{escaped}\}}")
    replacement = str(value)
    return pattern.sub(lambda _: replacement, url)


def serialize_body(body: Any) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    return json.dumps(body).encode("utf-8")


def decode_payload(body: bytes) -> Any:
    if not body:
        return None
    text = body.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class EchoOptions:
    """Accumulated, not yet dispatched request configuration."""

    base_url: str | None = None
    url: str | None = None
    method: HttpMethod | None = None
    headers: dict[str, str] = field(default_factory=dict)
    parameters: dict[str, Any] = field(default_factory=dict)
    body: Any = None

    def with_base_url(self, base_url: str) -> "EchoOptions":
        return replace(self, base_url=base_url)

    def with_url(self, url: str) -> "EchoOptions":
        return replace(self, url=url)

    def with_method(self, method: HttpMethod | str) -> "EchoOptions":
        return replace(self, method=HttpMethod.parse(method))

    def with_headers(self, headers: dict[str, str]) -> "EchoOptions":
        return replace(self, headers={**self.headers, **headers})

    def with_parameters(self, parameters: dict[str, Any]) -> "EchoOptions":
        return replace(self, parameters={**self.parameters, **parameters})

    def with_path(self, name: str, value: Any) -> "EchoOptions":
        if self.url is None:
            substitute_path("", name, value)
            return self
        return replace(self, url=substitute_path(self.url, name, value))

    def with_body(self, body: Any) -> "EchoOptions":
        return replace(self, body=body)

    @property
    def full_url(self) -> str:
        if self.base_url:
            return self.base_url + (self.url or "")
        return self.url or ""


@dataclass(frozen=True)
class EchoRequest:
    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    body: bytes = b""
    timeout: float | None = None

    def with_headers(self, **headers: str) -> "EchoRequest":
        return replace(self, headers={**self.headers, **headers})

    def with_timeout(self, timeout: float) -> "EchoRequest":
        return replace(self, timeout=timeout)

    def with_body(self, body: bytes) -> "EchoRequest":
        return replace(self, body=body)


@dataclass(frozen=True)
class EchoResponse(Generic[T]):
    status_code: int
    headers: dict[str, str]
    body: bytes
    latency_ms: int
    request: EchoRequest
    reason_phrase: str = ""
    data: T | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body)

    def text(self) -> str:
        return self.body.decode("utf-8")
