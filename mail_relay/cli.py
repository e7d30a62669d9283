"""Command-line interface for the mail relay.

Usage:
    mail-relay serve --port 8000
    mail-relay send --to dest@example.com --subject "Hi" --body "Hello" \\
        --number 42 --sender-user me@gmail.com --sender-pass app-password

Both commands read their settings from ``config.ini`` (or ``RELAY_CONFIG``)
with environment variables as fallbacks.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, Optional

import click
from rich.console import Console

from mail_relay.config_loader import RelaySettings, load_settings, normalize_log_level
from mail_relay.handler import MailDispatchHandler
from mail_relay.logger import configure_logging

console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def print_error(message: str) -> None:
    """Print an error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data, indent=2, default=str))


@click.group()
@click.option("--config", "config_path", default=None, help="Path to config.ini (default: $RELAY_CONFIG or config.ini).")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str]) -> None:
    """mail-relay: relay one email per authenticated HTTP request."""
    ctx.ensure_object(dict)
    ctx.obj["settings"] = load_settings(config_path)


@main.command("serve")
@click.option("--host", "-h", default=None, help="Host to bind to (default: from settings).")
@click.option("--port", "-p", type=int, default=None, help="Port to listen on (default: from settings).")
@click.pass_context
def serve(ctx: click.Context, host: Optional[str], port: Optional[int]) -> None:
    """Run the HTTP server."""
    import uvicorn

    from mail_relay.api import create_app

    settings: RelaySettings = ctx.obj["settings"]
    configure_logging(settings.log_level)
    if not settings.api_key:
        err_console.print("[yellow]Warning:[/yellow] API_KEY is not configured, every request will be rejected.")
    app = create_app(MailDispatchHandler(settings))
    uvicorn.run(
        app,
        host=host or settings.http_host,
        port=port or settings.http_port,
        log_level=normalize_log_level(settings.log_level).lower(),
    )


@main.command("send")
@click.option("--to", "to_email", required=True, help="Recipient address.")
@click.option("--subject", required=True, help="Message subject.")
@click.option("--body", required=True, help="Plain text body; newlines become <br> in the HTML part.")
@click.option("--number", required=True, help="Caller correlation id.")
@click.option("--sender-user", required=True, help="SMTP username, also used as From.")
@click.option("--sender-pass", required=True, prompt=True, hide_input=True, help="SMTP password or app password.")
@click.pass_context
def send(
    ctx: click.Context,
    to_email: str,
    subject: str,
    body: str,
    number: str,
    sender_user: str,
    sender_pass: str,
) -> None:
    """Send one email through the relay handler without going through HTTP."""
    settings: RelaySettings = ctx.obj["settings"]
    configure_logging(settings.log_level)
    if not settings.api_key:
        print_error("API_KEY is not configured")
        sys.exit(1)

    handler = MailDispatchHandler(settings)
    payload = {
        "to_email": to_email,
        "subject": subject,
        "body": body.replace("\\n", "\n"),
        "number": number,
        "sender_user": sender_user,
        "sender_pass": sender_pass,
    }
    result = run_async(handler.handle("POST", settings.api_key, payload))
    print_json(result.body)
    if not result.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
