"""
AsyncChatClient — main client façade.
"""

from typing import Any, Callable, Optional

import httpx

from wschat.auth import Auth, AuthSession
from wschat.channels import ChannelsAPI
from wschat.engine import ChatEngine, Listener
from wschat.errors import AuthError
from wschat.models.entry import ChatEntry
from wschat.models.events import ConnectionState
from wschat.transport.http import DEFAULT_BASE_URL, HttpClient
from wschat.transport.websocket import Connector, ws_url_from_base


class AsyncChatClient:
    """Async chat client: REST collaborators plus one channel session at a time."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        auth_session: Optional[AuthSession] = None,
        ws_url: Optional[str] = None,
        connector: Optional[Connector] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        open_timeout: float = 10.0,
    ):
        self._base_url = base_url
        self._ws_url = ws_url or ws_url_from_base(base_url)
        session = auth_session or AuthSession()

        self.http = HttpClient(base_url=base_url, token=session.token, transport=http_transport)
        self.auth = Auth(self.http, session)
        self.channels = ChannelsAPI(self.http)
        self.engine = ChatEngine(connector=connector, open_timeout=open_timeout)

    @property
    def auth_session(self) -> AuthSession:
        return self.auth.session

    @property
    def ws_url(self) -> str:
        return self._ws_url

    @property
    def connected(self) -> bool:
        return self.engine.state == ConnectionState.OPEN

    @property
    def entries(self) -> tuple[ChatEntry, ...]:
        return self.engine.entries

    @property
    def online_users(self) -> frozenset[str]:
        return self.engine.online_users

    def add_listener(self, handler: Listener) -> Callable[[], None]:
        return self.engine.add_listener(handler)

    async def join(self, channel: str, username: Optional[str] = None) -> bool:
        """Join a channel. Without an explicit username the authenticated user is used."""
        name = username or self.auth_session.username
        if not name:
            raise AuthError("Log in before joining a channel.")
        return await self.engine.join(name, channel, self._ws_url)

    async def send(self, content: str) -> Optional[str]:
        return await self.engine.send(content)

    async def leave(self) -> None:
        await self.engine.leave()

    async def close(self) -> None:
        await self.engine.leave()
        await self.http.close()

    async def __aenter__(self) -> "AsyncChatClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
