"""
wschat CLI — `wschat` command.

Commands:
  wschat auth login|register|status|logout   Account commands
  wschat channels                            List channels on the server
  wschat chat <channel>                      Interactive channel chat
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install wschat[cli]")

from wschat.auth import AuthSession
from wschat.client import AsyncChatClient
from wschat.transport.http import DEFAULT_BASE_URL

console = Console()
CONFIG_FILE = Path.home() / ".wschat" / "config.json"
BASE_URL_ENV = "WSCHAT_BASE_URL"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _base_url(cfg: dict, override: Optional[str] = None) -> str:
    return override or os.environ.get(BASE_URL_ENV) or cfg.get("base_url", DEFAULT_BASE_URL)


def _get_client(base_url: Optional[str] = None) -> AsyncChatClient:
    cfg = _load_config()
    return AsyncChatClient(
        base_url=_base_url(cfg, base_url),
        auth_session=AuthSession(token=cfg.get("token")),
    )


def _run(coro):
    return asyncio.run(coro)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
def main(verbose: bool):
    """wschat — real-time channel chat from the terminal."""
    _setup_logging(verbose)


# Register subcommands from separate modules
from wschat.cli.auth import auth
from wschat.cli.channels import channels_cmd
from wschat.cli.chat import chat_cmd

main.add_command(auth)
main.add_command(channels_cmd)
main.add_command(chat_cmd)


if __name__ == "__main__":
    main()
