"""Shared fixtures: an in-memory websocket stand-in and engine helpers."""

import asyncio
import json
from typing import Any, Callable, Optional

import pytest
from websockets.exceptions import ConnectionClosedError, ConnectionClosedOK

from wschat.engine import ChatEngine


class FakeSocket:
    """Minimal stand-in for a websockets ClientConnection."""

    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def send(self, frame: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        self.sent.append(frame)

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(None)

    def feed(self, frame: Any) -> None:
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(frame)

    def drop(self) -> None:
        """Simulate an abnormal transport close."""
        self._inbox.put_nowait(ConnectionClosedError(None, None))

    @property
    def sent_json(self) -> list[dict[str, Any]]:
        return [json.loads(f) for f in self.sent]

    def __aiter__(self) -> "FakeSocket":
        return self

    async def __anext__(self) -> str:
        item = await self._inbox.get()
        if item is None:
            raise StopAsyncIteration
        if isinstance(item, Exception):
            raise item
        return item


async def settle(rounds: int = 5) -> None:
    """Let background reader tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def fake_socket() -> FakeSocket:
    return FakeSocket()


@pytest.fixture
def connector(fake_socket: FakeSocket) -> Callable[[str], Any]:
    endpoints: list[str] = []

    async def _connect(endpoint: str) -> FakeSocket:
        endpoints.append(endpoint)
        return fake_socket

    _connect.endpoints = endpoints  # type: ignore[attr-defined]
    return _connect


@pytest.fixture
def engine(connector) -> ChatEngine:
    return ChatEngine(connector=connector)


class EventLog:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def __call__(self, kind: str, payload: Any) -> None:
        self.events.append((kind, payload))

    def of(self, kind: str) -> list[Any]:
        return [p for k, p in self.events if k == kind]


@pytest.fixture
def events() -> EventLog:
    return EventLog()


def chat_frame(username: str, message: str, channel: str = "general",
               message_type: Optional[str] = None) -> dict[str, Any]:
    frame: dict[str, Any] = {"username": username, "message": message, "channel": channel}
    if message_type is not None:
        frame["message_type"] = message_type
    return frame
