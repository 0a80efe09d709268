"""
Websocket connection manager.

State machine: IDLE -> CONNECTING -> OPEN -> CLOSED, with ERROR reachable from
CONNECTING or OPEN on transport failure. CLOSED and ERROR are terminal for an
instance; there is no automatic reconnect.

On entering OPEN the manager sends a join frame carrying the session identity.
close() sends the matching leave frame first. Every transition is driven by the
transport (connect result, reader loop ending, failed write), never polled.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional
from urllib.parse import urlsplit, urlunsplit

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from wschat.errors import SessionError
from wschat.models.events import ConnectionState
from wschat.transport.envelope import build_envelope

if TYPE_CHECKING:
    from wschat.session import SessionContext

logger = logging.getLogger(__name__)

WS_PATH = "/ws"
DEFAULT_WS_URL = "ws://127.0.0.1:3000/ws"

Connector = Callable[[str], Awaitable[Any]]
Handler = Callable[..., None]

EVENT_KINDS = ("open", "message", "error", "close")


def ws_url_from_base(base_url: str) -> str:
    """Map the REST base URL (http[s]://host[:port]) to the socket endpoint."""
    parts = urlsplit(base_url)
    scheme = {"https": "wss", "http": "ws"}.get(parts.scheme, parts.scheme)
    return urlunsplit((scheme, parts.netloc, WS_PATH, "", ""))


class ConnectionManager:
    def __init__(
        self,
        session: SessionContext,
        connector: Optional[Connector] = None,
        open_timeout: float = 10.0,
    ):
        self._session = session
        self._open_timeout = open_timeout
        self._connector = connector or self._default_connector
        self._state = ConnectionState.IDLE
        self._ws: Optional[ClientConnection] = None
        self._reader: Optional[asyncio.Task[None]] = None
        self._handlers: dict[str, list[Handler]] = {kind: [] for kind in EVENT_KINDS}

    async def _default_connector(self, endpoint: str) -> ClientConnection:
        return await connect(endpoint, open_timeout=self._open_timeout)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    def add_handler(self, kind: str, handler: Handler) -> Callable[[], None]:
        """Register a handler for open/message/error/close. Returns a cleanup function."""
        if kind not in self._handlers:
            raise ValueError(f"Unknown connection event {kind!r}")
        self._handlers[kind].append(handler)

        def remove() -> None:
            try:
                self._handlers[kind].remove(handler)
            except ValueError:
                pass
        return remove

    def _dispatch(self, kind: str, *args: Any) -> None:
        for handler in list(self._handlers[kind]):
            try:
                handler(*args)
            except Exception:
                logger.exception("Connection %s handler failed", kind)

    def _fail(self, exc: BaseException) -> None:
        if self._state in (ConnectionState.CLOSED, ConnectionState.ERROR):
            return
        logger.error("Websocket transport failure: %s", exc)
        self._state = ConnectionState.ERROR
        self._dispatch("error", exc)

    async def connect(self, endpoint: str = DEFAULT_WS_URL) -> Optional[ClientConnection]:
        """Open the socket and send the join frame.

        Returns the transport handle, or None if the transport failed (the
        failure is reported once through the error handlers).
        """
        if self._state != ConnectionState.IDLE:
            raise RuntimeError(f"Connection already used (state={self._state.value})")
        if self._session.identity is None:
            raise SessionError("No active session to connect for")

        self._state = ConnectionState.CONNECTING
        logger.info("Connecting to %s", endpoint)
        try:
            ws = await self._connector(endpoint)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._fail(e)
            return None

        if self._state != ConnectionState.CONNECTING:
            # close() was requested while the handshake was in flight
            await ws.close()
            return None

        self._ws = ws
        self._state = ConnectionState.OPEN
        await self._send_signal()
        if self._state != ConnectionState.OPEN:
            # the join frame could not be written; _fail already reported it
            return None
        self._dispatch("open")
        self._reader = asyncio.create_task(self._read_loop(ws))
        return ws

    async def _read_loop(self, ws: ClientConnection) -> None:
        try:
            async for raw in ws:
                if self._state != ConnectionState.OPEN:
                    break
                self._dispatch("message", raw)
        except ConnectionClosedOK:
            pass
        except (ConnectionClosed, OSError) as e:
            self._fail(e)
            return
        if self._state == ConnectionState.OPEN:
            logger.info("Websocket closed by server")
            self._state = ConnectionState.CLOSED
            self._dispatch("close")

    async def _send_signal(self) -> None:
        identity = self._session.identity
        if identity is None:
            return
        username, channel = identity
        await self.send(build_envelope(username, channel, ""))

    async def send(self, frame: str) -> None:
        """Write one frame. Dropped silently unless the connection is OPEN."""
        if self._state != ConnectionState.OPEN or self._ws is None:
            logger.debug("Dropping frame, connection is %s", self._state.value)
            return
        try:
            await self._ws.send(frame)
        except (ConnectionClosed, OSError) as e:
            self._fail(e)

    async def close(self) -> None:
        """Send the leave frame if open, then close the socket."""
        if self._state == ConnectionState.OPEN:
            await self._send_signal()
        was_terminal = self._state in (ConnectionState.CLOSED, ConnectionState.ERROR)
        if self._state != ConnectionState.ERROR:
            self._state = ConnectionState.CLOSED

        ws, self._ws = self._ws, None
        if ws is not None:
            try:
                await ws.close()
            except (ConnectionClosed, OSError):
                logger.debug("Socket already gone during close", exc_info=True)
        reader, self._reader = self._reader, None
        if reader is not None and reader is not asyncio.current_task():
            try:
                await reader
            except asyncio.CancelledError:
                pass
        if not was_terminal:
            self._dispatch("close")
