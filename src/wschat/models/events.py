"""
Wire tags, connection states and engine notification kinds.
"""

from enum import Enum


class MessageType:
    """`message_type` values the server puts on inbound frames."""
    USER_LIST = "user_list"
    SYSTEM = "system"


class ConnectionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERROR = "error"


class EngineEvent:
    """Kinds delivered to ChatEngine listeners."""
    ENTRY = "entry"
    PRESENCE = "presence"
    NOTICE = "notice"
    STATE = "state"
