"""Basic unit tests for the wschat package."""

from wschat import (
    AsyncChatClient,
    ChatEngine,
    ChatClientError,
    AuthError,
    SessionError,
    EnvelopeError,
    ConnectionState,
    MessageType,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert AsyncChatClient is not None
    assert ChatEngine is not None


def test_error_hierarchy():
    assert issubclass(AuthError, ChatClientError)
    assert issubclass(SessionError, ChatClientError)
    assert issubclass(EnvelopeError, ChatClientError)


def test_error_attributes():
    err = ChatClientError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = SessionError("bad session", details={"channel": "general"})
    assert err_with_details.code == "session_error"
    assert err_with_details.details == {"channel": "general"}

    env_err = EnvelopeError("not json", raw="{oops")
    assert env_err.code == "envelope_error"
    assert env_err.details == {"raw": "{oops"}


def test_wire_constants():
    assert MessageType.USER_LIST == "user_list"
    assert MessageType.SYSTEM == "system"
    assert ConnectionState.OPEN.value == "open"
