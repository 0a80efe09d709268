"""REST collaborators against httpx.MockTransport."""

import json

import httpx
import pytest

from wschat.auth import NETWORK_ERROR, AuthSession
from wschat.client import AsyncChatClient
from wschat.errors import AuthError, ChatClientError
from wschat.models.events import ConnectionState

USER = {"id": "6f1c2f7e-0000-4000-8000-000000000001", "username": "bob", "email": "bob@example.com"}


def make_client(handler, **kwargs) -> AsyncChatClient:
    return AsyncChatClient(
        base_url="http://chat.test",
        http_transport=httpx.MockTransport(handler),
        **kwargs,
    )


def server(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/channels":
        return httpx.Response(200, json=["general", "random"])
    if path == "/api/auth/login":
        body = json.loads(request.content)
        if body == {"username": "bob", "password": "secret1"}:
            return httpx.Response(200, json={"token": "tok-1", "user": USER})
        return httpx.Response(401, json={"error": "Invalid username or password"})
    if path == "/api/auth/register":
        body = json.loads(request.content)
        if len(body["password"]) < 6:
            return httpx.Response(400, json={"error": "Username and email are required, password must be at least 6 characters"})
        return httpx.Response(200, json={"token": "tok-2", "user": {**USER, "username": body["username"]}})
    if path == "/api/auth/verify":
        if request.url.params.get("token") == "tok-1":
            return httpx.Response(200, json=USER)
        return httpx.Response(401, json={"error": "Invalid token"})
    return httpx.Response(404, text="404 Not Found")


@pytest.mark.asyncio
async def test_list_channels():
    async with make_client(server) as client:
        assert await client.channels.list() == ["general", "random"]


@pytest.mark.asyncio
async def test_unexpected_channels_payload():
    async with make_client(lambda r: httpx.Response(200, json={"channels": []})) as client:
        with pytest.raises(ChatClientError):
            await client.channels.list()


@pytest.mark.asyncio
async def test_login_establishes_session():
    async with make_client(server) as client:
        result = await client.auth.login("bob", "secret1")
        assert result.token == "tok-1"
        assert client.auth_session.authenticated
        assert client.auth_session.username == "bob"


@pytest.mark.asyncio
async def test_login_rejected_carries_server_error():
    async with make_client(server) as client:
        with pytest.raises(AuthError) as exc:
            await client.auth.login("bob", "wrong")
        assert str(exc.value) == "Invalid username or password"
        assert not client.auth_session.authenticated


@pytest.mark.asyncio
async def test_login_network_failure():
    def down(request):
        raise httpx.ConnectError("refused", request=request)

    async with make_client(down) as client:
        with pytest.raises(AuthError) as exc:
            await client.auth.login("bob", "secret1")
        assert str(exc.value) == NETWORK_ERROR


@pytest.mark.asyncio
async def test_register():
    async with make_client(server) as client:
        result = await client.auth.register("dana", "dana@example.com", "secret1")
        assert result.user.username == "dana"
        assert client.auth_session.username == "dana"
        with pytest.raises(AuthError):
            await client.auth.register("eve", "eve@example.com", "123")


@pytest.mark.asyncio
async def test_restore_valid_and_rejected_tokens():
    session = AuthSession(token="tok-1")
    async with make_client(server, auth_session=session) as client:
        assert await client.auth.restore("tok-1")
        assert session.username == "bob"
        assert not await client.auth.restore("expired")
        assert session.token is None
        assert not session.authenticated


@pytest.mark.asyncio
async def test_logout_clears_session():
    async with make_client(server) as client:
        await client.auth.login("bob", "secret1")
        client.auth.logout()
        assert client.auth_session.user is None
        assert client.auth_session.token is None


@pytest.mark.asyncio
async def test_join_requires_login(connector):
    async with make_client(server, connector=connector) as client:
        with pytest.raises(AuthError):
            await client.join("general")


@pytest.mark.asyncio
async def test_join_uses_authenticated_username(connector, fake_socket):
    async with make_client(server, connector=connector) as client:
        await client.auth.login("bob", "secret1")
        assert await client.join("general")
        assert client.connected
        assert connector.endpoints == ["ws://chat.test/ws"]
        assert fake_socket.sent_json[0] == {"username": "bob", "channel": "general", "message": ""}
    assert client.engine.state == ConnectionState.IDLE
    assert fake_socket.sent_json[-1]["message"] == ""
