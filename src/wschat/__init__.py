"""
wschat — websocket chat client.

Channel chat over a single websocket plus a small REST API, with a client-side
engine that reconciles optimistic sends and tracks channel presence.
"""

from wschat.client import AsyncChatClient
from wschat.auth import Auth, AuthSession
from wschat.channels import ChannelsAPI
from wschat.engine import ChatEngine
from wschat.errors import ChatClientError, AuthError, SessionError, EnvelopeError
from wschat.models.entry import ChatEntry
from wschat.models.events import ConnectionState, EngineEvent, MessageType

__version__ = "0.1.0"
__all__ = [
    "AsyncChatClient",
    "Auth",
    "AuthSession",
    "ChannelsAPI",
    "ChatEngine",
    "ChatEntry",
    "ChatClientError",
    "AuthError",
    "SessionError",
    "EnvelopeError",
    "ConnectionState",
    "EngineEvent",
    "MessageType",
]
