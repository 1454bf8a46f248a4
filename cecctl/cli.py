"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer

from cecctl.core.address import format_physical_address
from cecctl.core.config_loader import load_config
from cecctl.core.controller import CecController
from cecctl.core.errors import CecctlError

T = TypeVar("T")

app = typer.Typer(help="HDMI-CEC TV control through cec-client")


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to a YAML config file"),
    target: int | None = typer.Option(None, "--target", help="Logical address to control (0-15)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log adapter traffic"),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    ctx.obj = {"config": config, "target": target}


def _build_controller(ctx: typer.Context) -> CecController:
    options: dict[str, Any] = ctx.obj or {}
    loaded = load_config(options.get("config"))
    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    config = loaded.config
    if options.get("target") is not None:
        config = dataclasses.replace(config, target=options["target"])
    controller = CecController(config)
    for warning in controller.runtime_warnings():
        typer.echo(f"Warning: {warning}", err=True)
    return controller


def _run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def _fail(exc: CecctlError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(code=1)


@app.command("on")
def power_on(
    ctx: typer.Context,
    image_view: bool = typer.Option(False, "--image-view", help="Send Image View On instead of 'on'"),
) -> None:
    """Wake the target device."""
    try:
        controller = _build_controller(ctx)
        if image_view:
            _run(controller.image_view_on())
        else:
            _run(controller.turn_on())
        typer.echo("Power on sent")
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("standby")
def standby(ctx: typer.Context) -> None:
    """Put the target device into standby."""
    try:
        controller = _build_controller(ctx)
        _run(controller.standby())
        typer.echo("Standby sent")
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("status")
def status(ctx: typer.Context) -> None:
    """Print the target's power status."""
    try:
        controller = _build_controller(ctx)
    except CecctlError as exc:
        raise _fail(exc) from None

    result = _run(controller.get_power_status())
    if not result.available:
        typer.echo(f"Power status: unavailable ({result.error})")
        raise typer.Exit(code=1)
    typer.echo(f"Power status: {result.status}")


@app.command("key")
def send_keys(
    ctx: typer.Context,
    keys: list[str] = typer.Argument(..., help="Key names, aliases, or 0xNN codes"),
    hold: float | None = typer.Option(None, "--hold", help="Seconds between press and release"),
    delay: float = typer.Option(0.0, "--delay", help="Seconds between keys"),
) -> None:
    """Press one or more remote keys in order."""
    try:
        controller = _build_controller(ctx)
        results = _run(controller.send_key_sequence(keys, delay_s=delay, hold_s=hold))
        for result in results:
            typer.echo(f"Sent {result.key} (0x{result.code:02X})")
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("keys")
def list_keys(ctx: typer.Context) -> None:
    """List canonical key names and their codes."""
    try:
        controller = _build_controller(ctx)
    except CecctlError as exc:
        raise _fail(exc) from None

    for name, code in controller.key_table.names().items():
        typer.echo(f"0x{code:02X}  {name}")


@app.command("vendor")
def vendor_command(
    ctx: typer.Context,
    payload: str = typer.Argument(..., help="Hex bytes, e.g. '01 02' or '0x01:0x02'"),
    with_id: bool = typer.Option(False, "--with-id", help="Send Vendor Command With ID"),
    vendor_id: str | None = typer.Option(None, "--vendor-id", help="24-bit vendor id in hex"),
) -> None:
    """Send a vendor-specific command."""
    try:
        controller = _build_controller(ctx)
        if with_id or vendor_id is not None:
            result = _run(controller.send_vendor_command_with_id(payload, vendor_id=vendor_id))
        else:
            result = _run(controller.send_vendor_command(payload))
        typer.echo("Vendor command sent")
        if result.output:
            typer.echo(result.output)
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("active-source")
def active_source(
    ctx: typer.Context,
    physical_address: str | None = typer.Option(None, "--physical-address", help="e.g. 1.0.0.0"),
) -> None:
    """Announce this device as the active source."""
    try:
        controller = _build_controller(ctx)
        _run(controller.set_active_source(physical_address))
        address = physical_address or controller.physical_address
        typer.echo(f"Active source set to {format_physical_address(address)}")
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("osd-name")
def osd_name(ctx: typer.Context, name: str) -> None:
    """Send an OSD name to the target."""
    try:
        controller = _build_controller(ctx)
        _run(controller.set_osd_name(name))
        typer.echo(f"OSD name sent: {name}")
    except CecctlError as exc:
        raise _fail(exc) from None


@app.command("scan")
def scan(ctx: typer.Context) -> None:
    """List devices found on the CEC bus."""
    try:
        controller = _build_controller(ctx)
        result = _run(controller.scan_devices())
    except CecctlError as exc:
        raise _fail(exc) from None

    if not result.devices:
        typer.echo("No CEC devices found")
        return
    for device in result.devices:
        address = format_physical_address(device.physical_address) if device.physical_address else "?"
        typer.echo(f"#{device.logical_address:X} {device.name} @ {address}")
        if device.vendor_name:
            vendor = device.vendor_name
            if device.vendor_id:
                vendor = f"{vendor} ({device.vendor_id})"
            typer.echo(f"  vendor: {vendor}")
        if device.osd_name:
            typer.echo(f"  osd name: {device.osd_name}")
        if device.power_status:
            typer.echo(f"  power status: {device.power_status}")


@app.command("raw")
def raw(ctx: typer.Context, lines: list[str] = typer.Argument(..., help="cec-client command lines")) -> None:
    """Pass command lines straight to cec-client."""
    try:
        controller = _build_controller(ctx)
        result = _run(controller.send_raw(lines))
        if result.output:
            typer.echo(result.output)
    except CecctlError as exc:
        raise _fail(exc) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
