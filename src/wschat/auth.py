"""
Auth module — login, registration and token verification.

Authentication state lives in an explicit AuthSession value that callers hold
and pass to the client; nothing reads it from ambient/global state.
"""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from wschat.errors import AuthError, ChatClientError
from wschat.models.user import AuthResponse, UserInfo
from wschat.transport.http import HttpClient

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error. Please try again."


class AuthSession:
    """Token + user pair with an explicit init/teardown lifecycle."""

    def __init__(self, token: Optional[str] = None, user: Optional[UserInfo] = None):
        self.token = token
        self.user = user

    @property
    def authenticated(self) -> bool:
        return self.user is not None

    @property
    def username(self) -> Optional[str]:
        return self.user.username if self.user else None

    def establish(self, token: str, user: UserInfo) -> None:
        self.token = token
        self.user = user

    def clear(self) -> None:
        self.token = None
        self.user = None

    def __repr__(self) -> str:
        return f"AuthSession(user={self.username!r}, authenticated={self.authenticated})"


class Auth:
    def __init__(self, http: HttpClient, session: Optional[AuthSession] = None):
        self._http = http
        self.session = session or AuthSession()

    def _accept(self, data: dict) -> AuthResponse:
        try:
            result = AuthResponse.model_validate(data)
        except ValidationError as e:
            raise AuthError(f"Unexpected auth response: {e.error_count()} error(s)")
        self.session.establish(result.token, result.user)
        self._http.set_token(result.token)
        logger.info("Authenticated as %s", result.user.username)
        return result

    async def login(self, username: str, password: str) -> AuthResponse:
        try:
            data = await self._http.post(
                "/auth/login", {"username": username, "password": password}, authenticated=False,
            )
        except ChatClientError as e:
            raise AuthError(str(e))
        except httpx.HTTPError as e:
            logger.error("Login error: %s", e)
            raise AuthError(NETWORK_ERROR)
        return self._accept(data)

    async def register(self, username: str, email: str, password: str) -> AuthResponse:
        try:
            data = await self._http.post(
                "/auth/register",
                {"username": username, "email": email, "password": password},
                authenticated=False,
            )
        except ChatClientError as e:
            raise AuthError(str(e))
        except httpx.HTTPError as e:
            logger.error("Register error: %s", e)
            raise AuthError(NETWORK_ERROR)
        return self._accept(data)

    async def verify(self, token: str) -> Optional[UserInfo]:
        """Check a token with the server. Returns the user, or None if rejected."""
        try:
            data = await self._http.post("/auth/verify", params={"token": token}, authenticated=False)
            return UserInfo.model_validate(data)
        except (ChatClientError, httpx.HTTPError, ValidationError) as e:
            logger.warning("Token verification failed: %s", e)
            return None

    async def restore(self, token: str) -> bool:
        """Initialize the session from a saved token; clears it if the token is rejected."""
        user = await self.verify(token)
        if user is None:
            self.logout()
            return False
        self.session.establish(token, user)
        self._http.set_token(token)
        return True

    def logout(self) -> None:
        self.session.clear()
        self._http.set_token(None)
