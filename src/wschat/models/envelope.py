"""
Socket envelopes.

Outbound frames are `{username, channel, message}`. Inbound frames are decoded
once into one of three tagged models; anything else is rejected at the boundary.
"""

from typing import Literal, Optional, Union

from pydantic import BaseModel


class OutboundEnvelope(BaseModel):
    username: str
    channel: str
    message: str = ""  # empty for join/leave signals


class WireEnvelope(BaseModel):
    """Raw inbound frame as the server serializes it."""
    message: str
    username: Optional[str] = None
    channel: Optional[str] = None
    message_type: Optional[str] = None


class PresenceSnapshot(BaseModel):
    type: Literal["presence_snapshot"] = "presence_snapshot"
    payload: list[str]


class SystemNotice(BaseModel):
    type: Literal["system_notice"] = "system_notice"
    text: str


class ChatMessage(BaseModel):
    type: Literal["chat"] = "chat"
    username: str
    content: str


InboundEnvelope = Union[PresenceSnapshot, SystemNotice, ChatMessage]
