#!/usr/bin/env python3
"""
RTC Token CLI - issue and inspect channel join tokens

Commands:
    rtctoken issue                  Issue a token from configured credentials
    rtctoken inspect <token>        Decode a token's fields (no certificate needed)
    rtctoken config                 Show current configuration
    rtctoken version                Show version
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Optional

import typer
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table

from rtctoken import __version__, config
from rtctoken.errors import MalformedToken, TokenError
from rtctoken.inspector import TokenView, inspect
from rtctoken.issuer import Role, issue, issue_rtm, token_mode


# =============================================================================
# CLI Application
# =============================================================================

app = typer.Typer(
    name="rtctoken",
    help="🔐 RTC Token CLI - Issue and inspect channel join tokens",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
):
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# =============================================================================
# Utility Functions
# =============================================================================

def format_timestamp(ts: Optional[int]) -> str:
    """Format an epoch timestamp for display."""
    if ts is None:
        return "Unknown"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def truncate_key(key: str, length: int = 16) -> str:
    """Truncate a long hex string for display with ellipsis."""
    if len(key) <= length:
        return key
    return f"{key[:length//2]}...{key[-length//2:]}"


def render_view(view: TokenView, mismatches: Optional[list] = None) -> None:
    """Print a decoded token as a table."""
    table = Table(show_header=False, box=None)
    table.add_column("Property", style="dim", width=15)
    table.add_column("Value")

    table.add_row("Version", view.version or "[yellow](none)[/yellow]")
    table.add_row("Length", f"{len(view.raw)} bytes ({view.base64_length} base64 chars)")
    table.add_row("Signature", truncate_key(view.signature_hex, 32))
    table.add_row("App ID", f"[cyan]{view.app_id_hex}[/cyan]")
    table.add_row("Channel CRC", str(view.channel_crc))
    table.add_row("UID CRC", str(view.uid_crc))
    rprint(table)

    privileges = Table(show_header=True, header_style="bold cyan")
    privileges.add_column("Privilege")
    privileges.add_column("Expires")
    privileges.add_column("Timestamp")
    for privilege, expire_ts in view.message.items:
        privileges.add_row(str(privilege), format_timestamp(expire_ts), str(expire_ts))
    rprint(privileges)

    if view.message.truncated:
        rprint(
            f"[yellow]⚠️ Message declares {view.message.count} entries, "
            f"only {len(view.message.items)} present[/yellow]"
        )

    if view.is_expired():
        rprint("[red]✗[/red] Join privilege is [bold red]EXPIRED[/bold red]")
    else:
        rprint("[green]✓[/green] Join privilege is [bold green]ACTIVE[/bold green]")

    if mismatches:
        rprint(f"[red]✗ Mismatched fields:[/red] {', '.join(mismatches)}")
    elif mismatches is not None:
        rprint("[green]✓[/green] App ID, channel and uid match")


# =============================================================================
# Issue Command
# =============================================================================

@app.command("issue")
def issue_token(
    channel: Optional[str] = typer.Option(None, "--channel", "-c", help="Channel name"),
    uid: str = typer.Option("0", "--uid", "-u", help="Numeric uid or user account"),
    role: str = typer.Option("publisher", "--role", "-r", help="publisher or subscriber"),
    expire: Optional[int] = typer.Option(None, "--expire", "-e", help="Lifetime in seconds"),
    app_id: Optional[str] = typer.Option(None, "--app-id", help="App ID (default: AGORA_APP_ID)"),
    cert: Optional[str] = typer.Option(
        None, "--cert", help="App certificate (default: AGORA_APP_CERTIFICATE)"
    ),
    rtm: bool = typer.Option(False, "--rtm", help="Issue a messaging login token for --uid"),
    show: bool = typer.Option(False, "--inspect", "-i", help="Also print the decoded fields"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    🎫 Issue a channel join token.

    Examples:
        rtctoken issue --channel lobby --uid 12345
        rtctoken issue --uid alice --rtm --json
    """
    app_id = app_id or config.APP_ID
    cert = cert if cert is not None else config.APP_CERTIFICATE
    channel = channel or config.DEFAULT_CHANNEL
    expire = expire or config.EXPIRE_SECONDS

    try:
        if rtm:
            token = issue_rtm(app_id, cert, uid, expire_seconds=expire)
        else:
            token = issue(app_id, cert, channel, uid, role=Role.parse(role), expire_seconds=expire)
    except TokenError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        result = {
            "token": token,
            "appId": app_id,
            "uid": uid,
            "channel": "" if rtm else channel,
            "tokenMode": token_mode(token),
        }
        if token and show:
            result["inspect"] = inspect(token).to_dict()
        print(json.dumps(result, indent=2))
        return

    if token is None:
        rprint(Panel(
            "[bold yellow]No certificate configured[/bold yellow]\n\n"
            "The channel accepts unauthenticated joins; no token is needed.\n\n"
            "[dim]Set AGORA_APP_CERTIFICATE or pass --cert to issue tokens.[/dim]",
            title="Tokenless Mode",
            border_style="yellow",
        ))
        return

    print(token)
    if show:
        render_view(inspect(token))


# =============================================================================
# Inspect Command
# =============================================================================

@app.command("inspect")
def inspect_token(
    token: str = typer.Argument(..., help="Token string (with or without 006 prefix)"),
    as_json: bool = typer.Option(False, "--json", help="Output as JSON"),
    best_effort: bool = typer.Option(
        False, "--best-effort", help="Show partial fields for malformed tokens"
    ),
    app_id: Optional[str] = typer.Option(None, "--app-id", help="Expected App ID"),
    channel: Optional[str] = typer.Option(None, "--channel", "-c", help="Expected channel"),
    uid: Optional[str] = typer.Option(None, "--uid", "-u", help="Expected uid or account"),
):
    """
    🔍 Decode a token's structure. The signature is not verified.

    Examples:
        rtctoken inspect 006AbC...
        rtctoken inspect 006AbC... --channel lobby --uid 12345
    """
    try:
        view = inspect(token, best_effort=best_effort)
    except MalformedToken as e:
        rprint(Panel(
            f"[bold red]❌ {e}[/bold red]",
            title="Malformed Token",
            border_style="red",
        ))
        raise typer.Exit(1)

    mismatches = None
    if not view.error and any(v is not None for v in (app_id, channel, uid)):
        mismatches = view.mismatches(app_id=app_id, channel=channel, identity=uid)

    if as_json:
        result = view.to_dict()
        if mismatches is not None:
            result["mismatches"] = mismatches
        print(json.dumps(result, indent=2))
    else:
        if view.error:
            rprint(f"[yellow]⚠️ {view.error}[/yellow]")
        render_view(view, mismatches)

    if view.error or mismatches:
        raise typer.Exit(1)


# =============================================================================
# Config / Version Commands
# =============================================================================

@app.command("config")
def show_config():
    """⚙️  Show current configuration (certificate masked)."""
    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim", width=17)
    table.add_column("Value")
    for key, value in config.as_dict().items():
        table.add_row(key, str(value))
    rprint(table)


@app.command("version")
def show_version():
    """Show version."""
    rprint(f"rtctoken [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
