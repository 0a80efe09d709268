"""CLI: wschat chat <channel>"""

import asyncio
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape

from wschat.errors import AuthError, SessionError
from wschat.models.entry import ChatEntry
from wschat.models.events import EngineEvent

console = Console()

WELCOME = "Welcome to the chat! Start by sending a message."


def _load_config() -> dict:
    from wschat.cli.main import _load_config
    return _load_config()


def _get_client():
    from wschat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from wschat.cli.main import _run
    return _run(coro)


def format_entry(entry: ChatEntry) -> str:
    """Rich markup for one timeline entry."""
    stamp = entry.timestamp.astimezone().strftime("%H:%M")
    content = escape(entry.content)
    if entry.is_system:
        return f"[dim italic]  {content}[/dim italic]"
    if entry.own:
        return f"[dim]{stamp}[/dim] [green]you[/green]: {content}"
    return f"[dim]{stamp}[/dim] [bold cyan]{escape(entry.username or '?')}[/bold cyan]: {content}"


class TimelinePrinter:
    """Engine listener that prints each entry once, when it is final."""

    def __init__(self) -> None:
        self._printed: set[str] = set()

    def __call__(self, kind: str, payload: Any) -> None:
        if kind == EngineEvent.ENTRY:
            entry: ChatEntry = payload
            if entry.temporary or entry.id in self._printed:
                return
            self._printed.add(entry.id)
            console.print(format_entry(entry))
        elif kind == EngineEvent.NOTICE:
            console.print(f"[red]{escape(payload)}[/red]")


@click.command("chat")
@click.argument("channel")
@click.option("-u", "--username", default=None, help="Chat as this name instead of the logged-in user")
def chat_cmd(channel: str, username: Optional[str]):
    """Interactive chat in CHANNEL."""

    async def _chat():
        cfg = _load_config()
        async with _get_client() as client:
            if not username and cfg.get("token"):
                with console.status("Checking login..."):
                    await client.auth.restore(cfg["token"])
            client.add_listener(TimelinePrinter())
            try:
                opened = await client.join(channel, username)
            except (AuthError, SessionError) as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            if not opened:
                raise SystemExit(1)

            console.print(f"[bold]#{escape(channel)}[/bold] [dim](/users, /quit)[/dim]")
            if client.engine.has_welcome_message:
                console.print(f"[dim]{WELCOME}[/dim]")
            try:
                while client.connected:
                    msg = await asyncio.to_thread(click.prompt, "", prompt_suffix="> ", default="",
                                                  show_default=False)
                    if msg.strip().lower() in ("/quit", "/exit"):
                        break
                    if msg.strip().lower() == "/users":
                        users = ", ".join(sorted(client.online_users)) or "nobody"
                        console.print(f"[dim]{len(client.online_users)} online: {escape(users)}[/dim]")
                        continue
                    await client.send(msg)
            except (KeyboardInterrupt, EOFError, click.Abort):
                pass
            finally:
                await client.leave()

    _run(_chat())
