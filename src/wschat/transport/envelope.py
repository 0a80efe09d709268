"""
Envelope construction and parsing.

Inbound frames are decoded exactly once here. The engine only ever sees one of
PresenceSnapshot, SystemNotice or ChatMessage.
"""

import json
import logging
from typing import Any, Optional, Union

from pydantic import ValidationError

from wschat.errors import EnvelopeError
from wschat.models.envelope import (
    ChatMessage,
    InboundEnvelope,
    OutboundEnvelope,
    PresenceSnapshot,
    SystemNotice,
    WireEnvelope,
)
from wschat.models.events import MessageType

logger = logging.getLogger(__name__)


def build_envelope(username: str, channel: str, message: str = "") -> str:
    """Build an outbound frame as JSON text ready for the socket."""
    return OutboundEnvelope(username=username, channel=channel, message=message).model_dump_json()


def _decode_snapshot(wire: WireEnvelope) -> PresenceSnapshot:
    try:
        names = json.loads(wire.message)
    except json.JSONDecodeError as e:
        raise EnvelopeError(f"Undecodable user list: {e}", wire.message, code="malformed_snapshot")
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise EnvelopeError("User list is not a list of names", wire.message, code="malformed_snapshot")
    return PresenceSnapshot(payload=names)


def decode_envelope(raw: Union[str, bytes, dict[str, Any]]) -> InboundEnvelope:
    """Decode one inbound frame. Raises EnvelopeError for anything unrecognized."""
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise EnvelopeError(f"Frame is not JSON: {e}", raw)
    else:
        data = raw
    if not isinstance(data, dict):
        raise EnvelopeError("Frame is not a JSON object", raw)

    try:
        wire = WireEnvelope.model_validate(data)
    except ValidationError as e:
        raise EnvelopeError(f"Frame does not match the wire schema: {e.error_count()} error(s)", raw)

    if wire.message_type == MessageType.USER_LIST:
        return _decode_snapshot(wire)
    if wire.message_type == MessageType.SYSTEM:
        return SystemNotice(text=wire.message)
    if wire.message_type is not None:
        raise EnvelopeError(f"Unknown message_type {wire.message_type!r}", raw)
    if not wire.message:
        raise EnvelopeError("Chat frame without content", raw)
    if not wire.username:
        raise EnvelopeError("Chat frame without sender", raw)
    return ChatMessage(username=wire.username, content=wire.message)


def parse_envelope(raw: Union[str, bytes, dict[str, Any]]) -> Optional[InboundEnvelope]:
    """Decode an inbound frame. Returns None (and logs) if invalid."""
    try:
        return decode_envelope(raw)
    except EnvelopeError as e:
        logger.warning("Discarding inbound frame (%s): %s", e.code, e)
        return None
