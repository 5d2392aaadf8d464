"""CLI commands for approval-buttons."""

import asyncio
import platform
import signal
import sys
import time
from pathlib import Path

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from approval_buttons import __logo__, __version__

app = typer.Typer(
    name="approval-buttons",
    help=f"{__logo__} approval-buttons - Tap-to-approve exec requests in Telegram and Slack",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} approval-buttons v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """approval-buttons - Tap-to-approve exec requests."""
    pass


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO")


# ============================================================================
# Config
# ============================================================================


@app.command()
def init(
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
):
    """Write a default config file."""
    from approval_buttons.config.loader import get_config_path, save_config
    from approval_buttons.config.schema import Config

    path = config_path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)

    save_config(Config(), path)
    console.print(f"[green]✓[/green] Created config at {path}")
    console.print("Set telegram.token + telegram.chatId and/or slack.token + slack.channel")


# ============================================================================
# Gateway
# ============================================================================


@app.command()
def gateway(
    host: str = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: int = typer.Option(None, "--port", "-p", help="Hook server port (default from config)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Start the approval hook server."""
    from approval_buttons.channels import ApprovalChannel, SlackChannel, TelegramChannel
    from approval_buttons.config.loader import load_config
    from approval_buttons.coordinator import ApprovalCoordinator
    from approval_buttons.diagnostics import (
        log_startup_diagnostics,
        resolve_config,
        run_health_check,
        run_startup_checks,
    )
    from approval_buttons.gateway.server import GatewayServer

    config = load_config(config_path)
    _configure_logging(verbose or config.approvals.verbose)

    resolved = resolve_config(config)
    if resolved is None:
        console.print("[red]Error: No channel configured.[/red]")
        console.print("Set telegram.token/chatId or slack.token/channel, or the matching env vars")
        raise typer.Exit(1)

    log_startup_diagnostics(resolved)

    channels: dict[str, ApprovalChannel] = {}
    if resolved.telegram:
        channels["telegram"] = TelegramChannel(resolved.telegram.token, resolved.telegram.chat_id)
        console.print("[green]✓[/green] Telegram enabled")
    if resolved.slack:
        channels["slack"] = SlackChannel(resolved.slack.token, resolved.slack.channel)
        console.print("[green]✓[/green] Slack enabled")

    bind_host = host or config.gateway.host
    bind_port = port or config.gateway.port

    async def run():
        started_at = time.time()
        coordinator = ApprovalCoordinator(channels, resolved.stale_ttl_ms)

        async def health():
            return await run_health_check(resolved, channels, coordinator.store, started_at)

        server = GatewayServer(coordinator, bind_host, bind_port, health_check=health)
        shutdown_event = asyncio.Event()

        def signal_handler():
            console.print("\n[yellow]Shutting down...[/yellow]")
            shutdown_event.set()

        if platform.system() == "Windows":
            # Windows asyncio doesn't support loop.add_signal_handler
            signal.signal(signal.SIGINT, lambda s, f: signal_handler())
            signal.signal(signal.SIGTERM, lambda s, f: signal_handler())
        else:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, signal_handler)

        startup_task: asyncio.Task | None = None
        try:
            await server.start()
            coordinator.start()
            # Connectivity is informational only; don't hold up the hook
            startup_task = asyncio.create_task(run_startup_checks(channels))
            console.print(
                f"{__logo__} v{__version__} listening on http://{bind_host}:{bind_port} "
                f"(stale after {resolved.stale_mins}m)"
            )
            await shutdown_event.wait()
        finally:
            console.print("[dim]Cleaning up...[/dim]")
            if startup_task:
                startup_task.cancel()
            await server.stop()
            await coordinator.close()

    asyncio.run(run())


@app.command()
def status(
    port: int = typer.Option(None, "--port", "-p", help="Hook server port (default from config)"),
    config_path: Path = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show health and stats of a running gateway."""
    from approval_buttons.config.loader import get_config_path, load_config
    from approval_buttons.diagnostics import HealthCheck, format_health_check

    path = config_path or get_config_path()
    config = load_config(config_path)
    url = f"http://{config.gateway.host}:{port or config.gateway.port}/health"

    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[red]✗[/red]'}")

    try:
        resp = httpx.get(url, timeout=15.0)
        resp.raise_for_status()
    except httpx.HTTPError as e:
        console.print(f"[red]Gateway not reachable at {url}: {e}[/red]")
        raise typer.Exit(1)

    health = HealthCheck.from_dict(resp.json())
    console.print(format_health_check(health))
    if not health.ok:
        raise typer.Exit(1)


# ============================================================================
# Parsing
# ============================================================================


@app.command()
def parse(
    file: Path = typer.Argument(None, help="File with the approval text (default: stdin)"),
):
    """Parse an exec approval message and show the extracted fields."""
    from approval_buttons.approvals.parser import parse_approval_text

    if file:
        if not file.exists():
            console.print(f"[red]File not found: {file}[/red]")
            raise typer.Exit(1)
        text = file.read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    info = parse_approval_text(text)
    if info is None:
        console.print("[yellow]Not an exec approval request.[/yellow]")
        raise typer.Exit(1)

    table = Table(title="Exec Approval")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for name in ("id", "command", "cwd", "host", "agent", "security", "ask", "expires"):
        table.add_row(name, getattr(info, name))
    console.print(table)


if __name__ == "__main__":
    app()
