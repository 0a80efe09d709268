"""
wschat error types.
"""

from typing import Any, Optional


class ChatClientError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AuthError(ChatClientError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class SessionError(ChatClientError):
    def __init__(self, message: str, code: str = "session_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class EnvelopeError(ChatClientError):
    """Raised when an inbound frame cannot be decoded into a known envelope."""

    def __init__(self, message: str, raw: Any = None, code: str = "envelope_error"):
        super().__init__(code, message, {"raw": raw} if raw is not None else None)
