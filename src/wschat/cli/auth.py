"""CLI: wschat auth login|register|status|logout"""

from typing import Optional

import click
from rich.console import Console

from wschat.errors import AuthError

console = Console()


def _load_config() -> dict:
    from wschat.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from wschat.cli.main import _save_config
    _save_config(cfg)


def _get_client(base_url: Optional[str] = None):
    from wschat.cli.main import _get_client
    return _get_client(base_url)


def _run(coro):
    from wschat.cli.main import _run
    return _run(coro)


def _remember(cfg: dict, client, result) -> None:
    _save_config({**cfg, "token": result.token, "username": result.user.username,
                  "email": result.user.email, "base_url": client.http.base_url})
    console.print("[dim]Token saved to ~/.wschat/config.json[/dim]")


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--base-url", default=None, help="Chat server base URL")
def auth_login(base_url: Optional[str]):
    """Log in with username and password."""

    async def _login():
        cfg = _load_config()
        username = click.prompt("Username").strip()
        password = click.prompt("Password", hide_input=True)
        async with _get_client(base_url) as client:
            try:
                with console.status("Signing in..."):
                    result = await client.auth.login(username, password)
            except AuthError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            console.print(f"[green]Logged in as {result.user.username}[/green]")
            _remember(cfg, client, result)

    _run(_login())


@auth.command("register")
@click.option("--base-url", default=None, help="Chat server base URL")
def auth_register(base_url: Optional[str]):
    """Create an account."""

    async def _register():
        cfg = _load_config()
        username = click.prompt("Username").strip()
        email = click.prompt("Email").strip()
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
        async with _get_client(base_url) as client:
            try:
                with console.status("Creating account..."):
                    result = await client.auth.register(username, email, password)
            except AuthError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            console.print(f"[green]Registered and logged in as {result.user.username}[/green]")
            _remember(cfg, client, result)

    _run(_register())


@auth.command("status")
@click.option("--check", is_flag=True, help="Verify the saved token with the server")
def auth_status(check: bool):
    """Show current auth status."""
    cfg = _load_config()
    if not cfg.get("token"):
        console.print("[yellow]Not logged in. Run `wschat auth login`.[/yellow]")
        return
    if not check:
        console.print(f"[green]Logged in[/green] as {cfg.get('username', 'unknown')}")
        return

    async def _check():
        async with _get_client() as client:
            ok = await client.auth.restore(cfg["token"])
            if ok:
                console.print(f"[green]Token valid[/green] for {client.auth_session.username}")
            else:
                _save_config({k: v for k, v in cfg.items() if k not in ("token", "username", "email")})
                console.print("[yellow]Saved token was rejected and has been cleared.[/yellow]")

    _run(_check())


@auth.command("logout")
def auth_logout():
    """Clear saved credentials."""
    cfg = _load_config()
    _save_config({k: v for k, v in cfg.items() if k == "base_url"})
    console.print("[green]Logged out.[/green]")
