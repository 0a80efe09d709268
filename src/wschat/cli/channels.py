"""CLI: wschat channels"""

import json

import click
import httpx
from rich.console import Console
from rich.table import Table

from wschat.errors import ChatClientError

console = Console()


def _get_client():
    from wschat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from wschat.cli.main import _run
    return _run(coro)


@click.command("channels")
@click.option("--json-output", "--json", is_flag=True)
def channels_cmd(json_output: bool):
    """List channels on the server."""

    async def _list():
        async with _get_client() as client:
            try:
                names = await client.channels.list()
            except (ChatClientError, httpx.HTTPError) as e:
                console.print(f"[red]Failed to fetch channels: {e}[/red]")
                raise SystemExit(1)
        if json_output:
            click.echo(json.dumps(names, indent=2))
            return
        if not names:
            console.print("[dim]No channels yet. Join one to create it.[/dim]")
            return
        table = Table(title=f"Channels ({len(names)})")
        table.add_column("Name", style="bold")
        for name in sorted(names):
            table.add_row(name)
        console.print(table)

    _run(_list())
