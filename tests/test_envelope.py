import json

import pytest

from wschat.errors import EnvelopeError
from wschat.models.envelope import ChatMessage, PresenceSnapshot, SystemNotice
from wschat.transport.envelope import build_envelope, decode_envelope, parse_envelope


def test_build_envelope_wire_shape():
    assert json.loads(build_envelope("bob", "general", "hi")) == {
        "username": "bob", "channel": "general", "message": "hi",
    }


def test_build_signal_envelope_has_empty_message():
    assert json.loads(build_envelope("bob", "general"))["message"] == ""


def test_decode_user_list():
    env = decode_envelope(json.dumps({
        "username": "System", "channel": "general",
        "message": json.dumps(["bob", "carol"]), "message_type": "user_list",
    }))
    assert isinstance(env, PresenceSnapshot)
    assert env.type == "presence_snapshot"
    assert env.payload == ["bob", "carol"]


def test_decode_system_notice():
    env = decode_envelope({"message_type": "system", "message": "carol joined general"})
    assert isinstance(env, SystemNotice)
    assert env.text == "carol joined general"


def test_decode_chat():
    env = decode_envelope(b'{"username": "bob", "message": "hi", "channel": "general"}')
    assert isinstance(env, ChatMessage)
    assert (env.username, env.content) == ("bob", "hi")


@pytest.mark.parametrize("raw", [
    "Invalid join message",
    "[1, 2]",
    "null",
    json.dumps({"username": "bob"}),
    json.dumps({"username": "bob", "message": ""}),
    json.dumps({"message": "orphan"}),
    json.dumps({"message": "x", "message_type": "typing"}),
    json.dumps({"message": 42, "username": "bob"}),
])
def test_decode_rejects_malformed(raw):
    with pytest.raises(EnvelopeError):
        decode_envelope(raw)


@pytest.mark.parametrize("payload", ["not json", json.dumps({"a": 1}), json.dumps(["a", 2])])
def test_malformed_snapshot_payload(payload):
    with pytest.raises(EnvelopeError) as exc:
        decode_envelope({"message_type": "user_list", "message": payload})
    assert exc.value.code == "malformed_snapshot"


def test_parse_envelope_returns_none_and_logs(caplog):
    with caplog.at_level("WARNING"):
        assert parse_envelope("garbage") is None
    assert "Discarding inbound frame" in caplog.text
