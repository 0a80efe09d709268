"""
Client-side synchronization for one channel session.

Composes SessionContext, ConnectionManager, PresenceTracker and
MessageReconciler. Routing of inbound envelopes:
- presence_snapshot -> PresenceTracker.apply_snapshot
- system_notice     -> PresenceTracker.apply_notice + timeline system entry
- chat              -> MessageReconciler.reconcile_or_append

Everything runs on the event loop that owns the engine. Each inbound frame and
each user action mutates state synchronously, so mutations never interleave.
"""

import logging
from typing import Any, Callable, Optional, Union

from wschat.models.entry import ChatEntry
from wschat.models.envelope import ChatMessage, InboundEnvelope, PresenceSnapshot, SystemNotice
from wschat.models.events import ConnectionState, EngineEvent
from wschat.presence import PresenceTracker
from wschat.reconciler import MessageReconciler
from wschat.session import SessionContext
from wschat.transport.envelope import build_envelope, parse_envelope
from wschat.transport.websocket import DEFAULT_WS_URL, ConnectionManager, Connector

logger = logging.getLogger(__name__)

CONNECT_FAILED_NOTICE = (
    "Could not connect to the chat server. Please make sure the backend is running."
)
CONNECTION_LOST_NOTICE = "Connection to the chat server was lost."

Listener = Callable[[str, Any], None]


class ChatEngine:
    def __init__(self, connector: Optional[Connector] = None, open_timeout: float = 10.0):
        self._connector = connector
        self._open_timeout = open_timeout
        self.presence = PresenceTracker()
        self.timeline = MessageReconciler()
        self.session = SessionContext(self.presence, self.timeline)
        self._listeners: list[Listener] = []
        self._connection_cleanups: list[Callable[[], None]] = []
        self._opened = False

    # -- read-only views ---------------------------------------------------

    @property
    def entries(self) -> tuple[ChatEntry, ...]:
        return self.timeline.entries

    @property
    def online_users(self) -> frozenset[str]:
        return self.presence.members

    @property
    def identity(self) -> Optional[tuple[str, str]]:
        return self.session.identity

    @property
    def state(self) -> ConnectionState:
        return self.session.connection_state

    @property
    def has_welcome_message(self) -> bool:
        return self.timeline.has_welcome_message

    # -- listeners -----------------------------------------------------------

    def add_listener(self, handler: Listener) -> Callable[[], None]:
        """Add a change listener. Returns a cleanup function."""
        self._listeners.append(handler)

        def remove() -> None:
            try:
                self._listeners.remove(handler)
            except ValueError:
                pass
        return remove

    def _emit(self, kind: str, payload: Any) -> None:
        for handler in list(self._listeners):
            try:
                handler(kind, payload)
            except Exception:
                logger.exception("Engine listener failed on %s", kind)

    # -- commands ------------------------------------------------------------

    async def join(self, username: str, channel: str, endpoint: str = DEFAULT_WS_URL) -> bool:
        """Begin a session and connect. Returns True once the socket is open."""
        self.session.begin(username, channel)
        connection = ConnectionManager(
            self.session, connector=self._connector, open_timeout=self._open_timeout,
        )
        self.session.connection = connection
        self._opened = False
        self._connection_cleanups = [
            connection.add_handler("open", self._on_transport_open),
            connection.add_handler("message", self.handle_raw),
            connection.add_handler("error", self._on_transport_error),
            connection.add_handler("close", self._on_transport_close),
        ]
        logger.info("Joining %s as %s", self.session.channel, self.session.username)
        handle = await connection.connect(endpoint)
        if handle is None:
            # failures were already reported by _on_transport_error
            return False
        self._emit(EngineEvent.STATE, connection.state)
        return True

    async def send(self, content: str) -> Optional[str]:
        """Show the message optimistically and forward it. Returns the entry id.

        Blank input is ignored. If the connection is not open the entry still
        appears but the frame is dropped and the entry stays temporary.
        """
        text = content.strip()
        if not text or not self.session.active:
            return None
        username, channel = self.session.identity  # type: ignore[misc]
        entry_id = self.timeline.append_optimistic(username, text)
        self._emit(EngineEvent.ENTRY, self.timeline.entries[-1])
        connection = self.session.connection
        if connection is not None:
            await connection.send(build_envelope(username, channel, text))
        return entry_id

    async def leave(self) -> None:
        """Send the leave frame (if open), close the socket and clear the session."""
        connection = self.session.connection
        for cleanup in self._connection_cleanups:
            cleanup()
        self._connection_cleanups = []
        if connection is not None:
            await connection.close()
        if self.session.active:
            logger.info("Left %s", self.session.channel)
        self.session.end()
        self._emit(EngineEvent.STATE, ConnectionState.CLOSED)

    close = leave

    # -- inbound -------------------------------------------------------------

    def handle_raw(self, raw: Union[str, bytes, dict[str, Any]]) -> None:
        """Decode and apply one inbound frame. Malformed frames are discarded."""
        if not self.session.active:
            logger.debug("Ignoring frame with no active session")
            return
        envelope = parse_envelope(raw)
        if envelope is None:
            return
        self.handle_envelope(envelope)

    def handle_envelope(self, envelope: InboundEnvelope) -> None:
        if not self.session.active:
            return
        if isinstance(envelope, PresenceSnapshot):
            self.presence.apply_snapshot(envelope.payload)
            self._emit(EngineEvent.PRESENCE, self.presence.members)
        elif isinstance(envelope, SystemNotice):
            entry = self.timeline.append_system(envelope.text)
            self._emit(EngineEvent.ENTRY, entry)
            if self.presence.apply_notice(envelope.text) is not None:
                self._emit(EngineEvent.PRESENCE, self.presence.members)
        elif isinstance(envelope, ChatMessage):
            is_self = self.session.is_self(envelope.username)
            entry = self.timeline.reconcile_or_append(envelope.username, envelope.content, is_self)
            self._emit(EngineEvent.ENTRY, entry)

    def _on_transport_open(self) -> None:
        self._opened = True

    def _on_transport_error(self, exc: BaseException) -> None:
        notice = CONNECTION_LOST_NOTICE if self._opened else CONNECT_FAILED_NOTICE
        self._emit(EngineEvent.STATE, ConnectionState.ERROR)
        self._emit(EngineEvent.NOTICE, notice)

    def _on_transport_close(self) -> None:
        # leave() unregisters this handler first, so only server-side closes land here
        self._emit(EngineEvent.STATE, ConnectionState.CLOSED)
        self._emit(EngineEvent.NOTICE, CONNECTION_LOST_NOTICE)
