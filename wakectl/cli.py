"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from pathlib import Path

import typer

from wakectl.commands import CommandRouter, format_probe, format_wake
from wakectl.core.errors import WakectlError
from wakectl.core.model import PROBE_REQUIRED, WAKE_REQUIRED, ActionResult, Permissions
from wakectl.core.service import DeviceService

app = typer.Typer(help="Permission-gated Wake-on-LAN and ping for configured devices")


class Capability(str, Enum):
    wol = "wol"
    ping = "ping"


def _build_service(ctx: typer.Context) -> DeviceService:
    devices_path = (ctx.obj or {}).get("devices")
    service = DeviceService(devices_path=devices_path)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    ctx: typer.Context,
    devices: Path | None = typer.Option(None, "--devices", help="Path to devices YAML file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"devices": devices}


@app.command("devices")
def list_devices(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Case-insensitive name filter"),
    user: str = typer.Option(..., "--user", help="Requesting user ID"),
    capability: list[Capability] | None = typer.Option(None, "--capability", help="Only devices allowing this action"),
) -> None:
    """List devices the user is allowed to act on."""
    try:
        service = _build_service(ctx)
        required = Permissions(**{c.value: True for c in capability or []})
        choices = service.search(query, user, required)
        if not choices:
            typer.echo("No devices found")
            return
        for choice in choices:
            typer.echo(f"{choice.value}: {choice.name}")
    except WakectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("wake")
def wake_device(
    ctx: typer.Context,
    device_id: str,
    user: str = typer.Option(..., "--user", help="Requesting user ID"),
) -> None:
    """Send a Wake-on-LAN packet to a device."""
    try:
        service = _build_service(ctx)
        result = asyncio.run(service.wake(device_id, user, WAKE_REQUIRED))
    except WakectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    message = format_wake(device_id, result.result, result.device, result.mac)
    if result.result is not ActionResult.SUCCESS:
        typer.echo(message, err=True)
        raise typer.Exit(code=1)
    typer.echo(message)


@app.command("ping")
def ping_device(
    ctx: typer.Context,
    device_id: str,
    user: str = typer.Option(..., "--user", help="Requesting user ID"),
) -> None:
    """Check whether a device answers ping."""
    try:
        service = _build_service(ctx)
        result = asyncio.run(service.probe(device_id, user, PROBE_REQUIRED))
    except WakectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    typer.echo(format_probe(device_id, result))
    if isinstance(result, ActionResult) or not result.alive:
        raise typer.Exit(code=1)


@app.command("chat")
def chat(ctx: typer.Context, user_id: str, text: str) -> None:
    """Run a single chat command as USER_ID, e.g. `wakectl chat 42 "!wake office"`."""
    try:
        router = CommandRouter(_build_service(ctx))
    except WakectlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    reply = asyncio.run(router.handle(user_id, text))
    if reply is None:
        typer.echo("Not a command. Commands start with '!'", err=True)
        raise typer.Exit(code=1)
    typer.echo(reply)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
