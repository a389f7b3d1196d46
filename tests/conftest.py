"""Shared fixtures for perch tests.

``sink`` collects the ASGI messages a ``ResponseWriter`` sends so tests
can drive handlers directly, without going through an App.
"""

from typing import Any

import pytest

from perch.http.request import Request
from perch.http.writer import ResponseWriter


class Sink:
    """Records ASGI send() messages and decodes them."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self.writer = ResponseWriter(self.send)

    async def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def started(self) -> bool:
        return any(m["type"] == "http.response.start" for m in self.messages)

    @property
    def status(self) -> int:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        msg = "response never started"
        raise AssertionError(msg)

    @property
    def headers(self) -> dict[str, str]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return {k.decode("latin-1"): v.decode("latin-1") for k, v in message["headers"]}
        return {}

    @property
    def body(self) -> bytes:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        )


def make_request(path: str = "/", method: str = "GET") -> Request:
    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request.from_asgi(
        {"type": "http", "method": method, "path": path, "headers": []},
        receive,
    )


@pytest.fixture
def sink() -> Sink:
    return Sink()


@pytest.fixture
def request_() -> Request:
    return make_request()
