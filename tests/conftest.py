import json
from typing import Any

import pytest

from echo.models import EchoRequest, EchoResponse


def make_response(
    request: EchoRequest,
    status_code: int = 200,
    data: Any = None,
    headers: dict[str, str] | None = None,
) -> EchoResponse:
    body = b"" if data is None else json.dumps(data).encode("utf-8")
    return EchoResponse(
        status_code=status_code,
        headers=headers or {"content-type": "application/json"},
        body=body,
        data=data,
        latency_ms=0,
        request=request,
    )


class RecordingTransport:
    """Answers every request with the same status and payload, keeping what it was sent."""

    def __init__(self, status_code: int = 200, data: Any = None, error: Exception | None = None):
        self.status_code = status_code
        self.data = data
        self.error = error
        self.requests: list[EchoRequest] = []

    async def __call__(self, request: EchoRequest) -> EchoResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return make_response(request, self.status_code, self.data)

    @property
    def last_request(self) -> EchoRequest:
        assert self.requests, "transport was never called"
        return self.requests[-1]


@pytest.fixture
def transport():
    return RecordingTransport(data={"x": 1})
