"""tailscale-localapi CLI Entry Point.

Thin command-line front end over TailscaleLocalAPI. Every command waits for
the startup probe, runs one LocalAPI call and prints the result as JSON
(or raw text for metrics and goroutine dumps).
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import structlog
import typer
from pydantic import BaseModel

from tailscale_localapi.client import TailscaleLocalAPI
from tailscale_localapi.core.config import get_settings
from tailscale_localapi.core.exceptions import ConfigurationError, LocalAPIError
from tailscale_localapi.core.logging_config import configure_logging
from tailscale_localapi.core.tailnet import is_in_tailscale_ip_range

log = structlog.get_logger()

app = typer.Typer(
    name="tailscale-localapi",
    help="Query the local tailscaled daemon through its LocalAPI",
    no_args_is_help=True,
)


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to configuration file"
    ),
    socket: Optional[str] = typer.Option(
        None, "--socket", "-s", help="tailscaled Unix socket path"
    ),
    socket_only: bool = typer.Option(
        False, "--socket-only", help="Never use macOS localhost TCP"
    ),
) -> None:
    """tailscale-localapi CLI."""
    if config is not None and not config.exists():
        typer.echo(f"Error: Config file '{config}' not found", err=True)
        raise typer.Exit(code=1)

    overrides: dict[str, Any] = {}
    if socket is not None:
        overrides["socket_path"] = socket
    if socket_only:
        overrides["use_socket_only"] = True

    try:
        settings = get_settings(
            force_reload=True,
            config_path=config,
            runtime_overrides={"transport": overrides} if overrides else None,
        )
    except ConfigurationError as e:
        typer.echo(f"Error loading config: {e}", err=True)
        raise typer.Exit(code=1)

    configure_logging(config=settings.logging)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def _echo_json(value: Any) -> None:
    typer.echo(json.dumps(_to_jsonable(value), indent=2, sort_keys=True))


def _run(action: Callable[[TailscaleLocalAPI], Awaitable[Any]]) -> Any:
    """Run one LocalAPI action once the daemon is reachable.

    Raises:
        typer.Exit: On any LocalAPIError (exit code 1).
    """

    async def _session() -> Any:
        async with TailscaleLocalAPI(settings=get_settings()) as api:
            await api.wait_ready()
            return await action(api)

    try:
        return asyncio.run(_session())
    except LocalAPIError as e:
        log.error("cli_command_failed", error=e.message, error_type=type(e).__name__)
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1)


@app.command()
def status(
    peers: bool = typer.Option(True, "--peers/--no-peers", help="Include the peer map"),
) -> None:
    """Show the daemon status."""
    if peers:
        _echo_json(_run(lambda api: api.status()))
    else:
        _echo_json(_run(lambda api: api.status_without_peers()))


@app.command()
def whois(addr: str = typer.Argument(..., help="Tailnet IP or IP:port")) -> None:
    """Show the node and user owning an address."""
    _echo_json(_run(lambda api: api.whois(addr)))


@app.command()
def prefs() -> None:
    """Show the current preferences."""
    _echo_json(_run(lambda api: api.prefs()))


@app.command()
def metrics(
    user: bool = typer.Option(False, "--user", help="User metrics instead of daemon metrics"),
) -> None:
    """Print Prometheus metrics."""
    if user:
        typer.echo(_run(lambda api: api.user_metrics()))
    else:
        typer.echo(_run(lambda api: api.daemon_metrics()))


@app.command()
def goroutines() -> None:
    """Print the daemon's goroutine dump."""
    typer.echo(_run(lambda api: api.goroutines()))


@app.command()
def files(
    wait: float = typer.Option(0, "--wait", "-w", min=0, help="Seconds to wait for a file"),
) -> None:
    """List Taildrop files waiting to be picked up."""
    _echo_json(_run(lambda api: api.await_waiting_files(wait)))


@app.command("file-targets")
def file_targets() -> None:
    """List peers that can receive files."""
    _echo_json(_run(lambda api: api.file_targets()))


@app.command()
def push(
    node: str = typer.Argument(..., help="Stable node ID of the target"),
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to send"),
) -> None:
    """Send a file to a peer with Taildrop."""
    _run(lambda api: api.push_file(node, path))
    typer.echo(f"Sent {path.name}")


@app.command()
def login() -> None:
    """Start an interactive login."""
    _run(lambda api: api.start_login_interactive())
    typer.echo("Interactive login started; see `status` for the auth URL")


@app.command()
def logout() -> None:
    """Log this node out."""
    _run(lambda api: api.logout())
    typer.echo("Logged out")


@app.command("in-range")
def in_range(addr: str = typer.Argument(..., help="Address to classify")) -> None:
    """Check whether an address belongs to the tailnet (no daemon needed)."""
    match = is_in_tailscale_ip_range(addr)
    if match is None:
        typer.echo(f"{addr} is not a tailnet address")
        raise typer.Exit(code=1)
    typer.echo(match)


if __name__ == "__main__":
    app()
