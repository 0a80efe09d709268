"""
Session context: identity of the current chat session.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from wschat.errors import SessionError
from wschat.models.events import ConnectionState
from wschat.presence import PresenceTracker
from wschat.reconciler import MessageReconciler

if TYPE_CHECKING:
    from wschat.transport.websocket import ConnectionManager


class SessionContext:
    """Holds (username, channel) and the connection for one join..leave span.

    begin() and end() reset the timeline and presence set they were given, so
    a new session never sees state from the previous one.
    """

    def __init__(self, presence: PresenceTracker, timeline: MessageReconciler):
        self._presence = presence
        self._timeline = timeline
        self._username: Optional[str] = None
        self._channel: Optional[str] = None
        self.connection: Optional[ConnectionManager] = None

    @property
    def active(self) -> bool:
        return self._username is not None

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def channel(self) -> Optional[str]:
        return self._channel

    @property
    def identity(self) -> Optional[tuple[str, str]]:
        if self._username is None or self._channel is None:
            return None
        return self._username, self._channel

    @property
    def connection_state(self) -> ConnectionState:
        if self.connection is None:
            return ConnectionState.IDLE
        return self.connection.state

    def begin(self, username: str, channel: str) -> None:
        username = username.strip()
        channel = channel.strip()
        if not username:
            raise SessionError("Username is required")
        if not channel:
            raise SessionError("Please enter a channel name.")
        if self.active:
            raise SessionError(f"Already in channel {self._channel!r}; leave it first")
        self._username = username
        self._channel = channel
        self._timeline.reset()
        self._presence.reset()

    def end(self) -> None:
        self._username = None
        self._channel = None
        self.connection = None
        self._presence.reset()
        self._timeline.reset()

    def is_self(self, username: Optional[str]) -> bool:
        return self._username is not None and username == self._username
