"""Observer client CLI.

Connection settings come from options or the OBSERVER_URL, OBSERVER_NAME and
OBSERVER_API_KEY environment variables.

Usage:
    observer-client status mc1                  # Show server status
    observer-client start mc1                   # Start a server
    observer-client stop mc1                    # Stop a server
    observer-client console mc1 say hello       # Send a console line
    observer-client players mc1 --format json   # List online players
    observer-client whitelist mc1 list          # Show whitelist
    observer-client whitelist mc1 add Steve     # Whitelist a player
    observer-client watch --event line          # Stream pushed events
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError

from .client import ObserverClient
from .config import ClientConfig
from .errors import ObserverError
from .protocol.commands import WhitelistAction
from .protocol.events import EventName

T = TypeVar("T")

# Output format options
FORMAT_TABLE = "table"
FORMAT_JSON = "json"

format_option = click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice([FORMAT_TABLE, FORMAT_JSON]),
    default=FORMAT_TABLE,
    help="Output format",
)


def truncate(text: str | None, max_len: int = 50) -> str:
    """Truncate text for display."""
    if not text:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def create_client(config: ClientConfig) -> ObserverClient:
    """Build the client used by every command."""
    return ObserverClient(config)


def _config(ctx: click.Context) -> ClientConfig:
    settings = ctx.obj
    missing = [f"--{key.replace('_', '-')}" for key, value in settings.items() if not value]
    if missing:
        raise click.UsageError(f"Missing connection settings: {', '.join(missing)}")
    try:
        return ClientConfig(**settings)
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e


def _run(ctx: click.Context, action: Callable[[ObserverClient], Awaitable[T]]) -> T:
    """Connect, run ``action`` and disconnect, mapping client errors to CLI errors."""
    config = _config(ctx)

    async def session() -> T:
        async with create_client(config) as client:
            return await action(client)

    try:
        return asyncio.run(session())
    except ObserverError as e:
        raise click.ClickException(str(e)) from e


def _emit_json(value: Any) -> None:
    click.echo(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def _outcome(ok: bool, success: str, failure: str) -> None:
    if ok:
        click.echo(success)
    else:
        click.echo(failure, err=True)
        sys.exit(1)


@click.group()
@click.option("--url", envvar="OBSERVER_URL", help="Supervising server URL")
@click.option("--name", envvar="OBSERVER_NAME", help="Display name to authenticate as")
@click.option("--api-key", envvar="OBSERVER_API_KEY", help="API key for authentication")
@click.option("--verbose", "-v", count=True, help="Increase log verbosity (-v info, -vv debug)")
@click.pass_context
def main(
    ctx: click.Context,
    url: str | None,
    name: str | None,
    api_key: str | None,
    verbose: int,
) -> None:
    """Observer client - control game servers through a supervising server."""
    # Protocol output goes to stdout; logs go to stderr.
    level = logging.WARNING if verbose == 0 else logging.INFO if verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)
    ctx.obj = {"url": url, "name": name, "api_key": api_key}


@main.command()
@click.argument("server")
@click.pass_context
def start(ctx: click.Context, server: str) -> None:
    """Start a server."""
    ok = _run(ctx, lambda client: client.start(server))
    _outcome(ok, f"Started {server}", f"Server {server} did not start")


@main.command()
@click.argument("server")
@click.pass_context
def stop(ctx: click.Context, server: str) -> None:
    """Stop a server."""
    ok = _run(ctx, lambda client: client.stop(server))
    _outcome(ok, f"Stopped {server}", f"Server {server} did not stop")


@main.command()
@click.argument("server")
@click.argument("text", nargs=-1, required=True)
@click.pass_context
def console(ctx: click.Context, server: str, text: tuple[str, ...]) -> None:
    """Send a console command to a server.

    Examples:

        observer-client console mc1 say hello everyone
    """
    line = " ".join(text)
    ok = _run(ctx, lambda client: client.console(server, line))
    _outcome(ok, f"Sent to {server}: {truncate(line)}", f"Server {server} rejected the command")


@main.command()
@click.argument("server")
@format_option
@click.pass_context
def players(ctx: click.Context, server: str, output_format: str) -> None:
    """List players online on a server."""
    names = _run(ctx, lambda client: client.get_online_players(server))

    if output_format == FORMAT_JSON:
        _emit_json(names)
        return

    if not names:
        click.echo(f"No players online on {server}.")
        return
    for player in names:
        click.echo(player)
    click.echo(f"\nTotal: {len(names)} player(s)")


@main.command()
@click.argument("server")
@format_option
@click.pass_context
def status(ctx: click.Context, server: str, output_format: str) -> None:
    """Show a server's status."""
    value = _run(ctx, lambda client: client.get_status(server))

    if output_format == FORMAT_JSON:
        _emit_json({"server": server, "status": value.value})
    else:
        click.echo(f"{server}: {value.value}")


@main.command()
@click.argument("server")
@click.argument("action", type=click.Choice([a.value for a in WhitelistAction]))
@click.argument("username", required=False)
@format_option
@click.pass_context
def whitelist(
    ctx: click.Context,
    server: str,
    action: str,
    username: str | None,
    output_format: str,
) -> None:
    """Show or change a server's whitelist.

    Examples:

        observer-client whitelist mc1 list

        observer-client whitelist mc1 add Steve
    """
    if action != WhitelistAction.LIST.value and not username:
        raise click.UsageError(f"'{action}' requires a USERNAME")

    result = _run(ctx, lambda client: client.whitelist(server, action, username))

    if action != WhitelistAction.LIST.value:
        verb = "Added" if action == WhitelistAction.ADD.value else "Removed"
        _outcome(result, f"{verb} {username}", f"Whitelist of {server} unchanged")
        return

    if output_format == FORMAT_JSON:
        _emit_json(result)
        return

    if not result:
        click.echo(f"Whitelist of {server} is empty.")
        return
    click.echo(f"{'UUID':<38} {'Name':<16}")
    click.echo("-" * 55)
    for entry in result:
        click.echo(f"{entry.get('uuid', '?'):<38} {truncate(entry.get('name'), 16):<16}")


def _render(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json()
    if hasattr(payload, "value"):
        return str(payload.value)
    return str(payload)


@main.command()
@click.option(
    "--event",
    "-e",
    "events",
    multiple=True,
    type=click.Choice([e.value for e in EventName if not e.is_lifecycle]),
    help="Event to print (repeatable, default: all)",
)
@click.pass_context
def watch(ctx: click.Context, events: tuple[str, ...]) -> None:
    """Print pushed events until the connection closes or Ctrl+C."""
    names = [EventName(e) for e in events] or [e for e in EventName if not e.is_lifecycle]

    def printer(name: EventName) -> Callable[[str, Any], None]:
        def print_event(server: str, payload: Any) -> None:
            click.echo(f"[{server}] {name.value}: {_render(payload)}")

        return print_event

    async def stream(client: ObserverClient) -> None:
        closed = asyncio.Event()
        client.on("disconnect", closed.set)
        for name in names:
            client.on(name, printer(name))
        await closed.wait()

    try:
        _run(ctx, stream)
    except KeyboardInterrupt:
        click.echo("\nShutting down", err=True)
        return
    click.echo("Connection closed", err=True)


if __name__ == "__main__":
    main()
