"""
Integration tests against a running chat server.

Requires environment variables:
  WSCHAT_INTEGRATION  — set to enable
  WSCHAT_BASE_URL     — (optional) defaults to http://127.0.0.1:3000

Run: WSCHAT_INTEGRATION=1 pytest tests/integration/ -v
"""

import asyncio
import os
import uuid

import pytest

from wschat import AsyncChatClient, ConnectionState

SKIP = not os.environ.get("WSCHAT_INTEGRATION")
BASE_URL = os.environ.get("WSCHAT_BASE_URL", "http://127.0.0.1:3000")

pytestmark = pytest.mark.skipif(SKIP, reason="WSCHAT_INTEGRATION not set")


async def eventually(predicate, timeout: float = 5.0) -> None:
    for _ in range(int(timeout / 0.05)):
        if predicate():
            return
        await asyncio.sleep(0.05)
    raise AssertionError("condition not met in time")


class TestAuth:
    @pytest.mark.asyncio
    async def test_register_then_login(self):
        name = f"it-{uuid.uuid4().hex[:8]}"
        async with AsyncChatClient(base_url=BASE_URL) as client:
            await client.auth.register(name, f"{name}@example.com", "secret123")
            client.auth.logout()
            result = await client.auth.login(name, "secret123")
            assert result.user.username == name
            assert await client.auth.verify(result.token) is not None


class TestChannel:
    @pytest.mark.asyncio
    async def test_send_is_confirmed_and_presence_tracked(self):
        channel = f"it-{uuid.uuid4().hex[:8]}"
        async with AsyncChatClient(base_url=BASE_URL) as alice, AsyncChatClient(base_url=BASE_URL) as bob:
            assert await alice.join(channel, username="alice")
            await eventually(lambda: "alice" in alice.online_users)
            assert channel in await alice.channels.list()

            assert await bob.join(channel, username="bob")
            await eventually(lambda: alice.online_users == {"alice", "bob"})

            await alice.send("hello bob")
            await eventually(lambda: not alice.engine.timeline.pending)
            await eventually(lambda: any(e.content == "hello bob" and not e.own for e in bob.entries))

            await bob.leave()
            await eventually(lambda: alice.online_users == {"alice"})
            assert alice.engine.state == ConnectionState.OPEN
