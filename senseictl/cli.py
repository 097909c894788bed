"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
import re
from enum import Enum
from importlib import metadata
from typing import TypeVar

import typer

from senseictl.core.errors import SenseictlError, ValidationError
from senseictl.core.model import (
    ConfigurationDelta,
    ConfigurationSnapshot,
    CpiSetting,
    Intensity,
    Mode,
    PollingRate,
    Pulsation,
)
from senseictl.core.profile_loader import DEFAULT_PROFILE_ID
from senseictl.core.protocol import quantize_cpi
from senseictl.core.service import SenseiService

app = typer.Typer(help="Configure SteelSeries Sensei Raw mice over USB")

_CPI_RE = re.compile(r"^[0-9]+$")
E = TypeVar("E", bound=Enum)


def _version() -> str:
    try:
        return metadata.version("senseictl")
    except metadata.PackageNotFoundError:
        return "unknown"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"senseictl {_version()}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    profile: str = typer.Option(DEFAULT_PROFILE_ID, "--profile", help="Device profile ID"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every USB step to stderr"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show program version and exit",
    ),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        )
    ctx.obj = {"profile": profile}


def _build_service(ctx: typer.Context) -> SenseiService:
    service = SenseiService(profile_id=ctx.obj["profile"])
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


def _parse_choice(enum_cls: type[E], raw: str, what: str) -> E:
    lowered = raw.strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == lowered:
            return member
    raise ValidationError(f"invalid {what}: {raw}")


def _parse_cpi(raw: str) -> CpiSetting:
    if not _CPI_RE.match(raw):
        raise ValidationError("invalid CPI value")
    return quantize_cpi(int(raw))


def _label(value: Enum | None) -> str:
    if value is None:
        return "unknown"
    if isinstance(value, PollingRate):
        return value.label
    return str(value.value)


def _echo_snapshot(snapshot: ConfigurationSnapshot) -> None:
    typer.echo(f"Backlight intensity: {_label(snapshot.intensity)}")
    typer.echo(f"Backlight pulsation: {_label(snapshot.pulsation)}")
    typer.echo(f"Speed in CPI (LED is off): {snapshot.cpi_off_real}")
    typer.echo(f"Speed in CPI (LED is on): {snapshot.cpi_on_real}")
    typer.echo(f"Polling frequency: {_label(snapshot.polling)}")


@app.command("show")
def show(ctx: typer.Context) -> None:
    """Show current mouse settings."""
    try:
        service = _build_service(ctx)
        _echo_snapshot(service.show())
    except SenseictlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set")
def set_options(
    ctx: typer.Context,
    mode: str | None = typer.Option(None, "--mode", help="legacy or normal"),
    polling: str | None = typer.Option(None, "--polling", help="Polling rate in Hz (1000, 500, 250, 125)"),
    cpi_on: str | None = typer.Option(None, "--cpi-on", help="CPI with the LED on"),
    cpi_off: str | None = typer.Option(None, "--cpi-off", help="CPI with the LED off"),
    pulsation: str | None = typer.Option(None, "--pulsation", help="steady, slow, medium or fast"),
    intensity: str | None = typer.Option(None, "--intensity", help="off, low, medium or high"),
    save: bool = typer.Option(False, "--save", help="Save the configuration to ROM afterwards"),
) -> None:
    """Change mouse settings; unspecified settings are left untouched."""
    try:
        cpi_on_setting = _parse_cpi(cpi_on) if cpi_on is not None else None
        cpi_off_setting = _parse_cpi(cpi_off) if cpi_off is not None else None
        delta = ConfigurationDelta(
            mode=_parse_choice(Mode, mode, "mode") if mode is not None else None,
            polling=_parse_choice(PollingRate, polling, "polling frequency") if polling is not None else None,
            intensity=_parse_choice(Intensity, intensity, "backlight intensity") if intensity is not None else None,
            pulsation=_parse_choice(Pulsation, pulsation, "backlight pulsation") if pulsation is not None else None,
            cpi_off=cpi_off_setting.step if cpi_off_setting else None,
            cpi_on=cpi_on_setting.step if cpi_on_setting else None,
            save=save,
        )
        if not delta.has_writes() and not delta.save:
            raise ValidationError("nothing to set; see 'senseictl set --help'")

        for setting in (cpi_off_setting, cpi_on_setting):
            if setting is not None and setting.notice:
                typer.echo(f"Notice: {setting.notice}", err=True)

        service = _build_service(ctx)
        service.apply(delta)
    except SenseictlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("save")
def save_to_rom(ctx: typer.Context) -> None:
    """Save the current configuration to ROM."""
    try:
        service = _build_service(ctx)
        service.save()
    except SenseictlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("profiles")
def list_profiles(ctx: typer.Context) -> None:
    """List device profiles and the product identities they accept."""
    try:
        service = _build_service(ctx)
        for profile in service.list_profiles():
            typer.echo(f"{profile.id}: {profile.name} (interface {profile.interface})")
            for identity in profile.identities:
                typer.echo(f"  {identity} {identity.name}".rstrip())
    except SenseictlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("devices")
def list_devices(ctx: typer.Context) -> None:
    """List attached devices matching the selected profile."""
    try:
        service = _build_service(ctx)
        devices = service.list_devices()
        if not devices:
            typer.echo("No suitable device found")
            return
        for identity in devices:
            typer.echo(f"{identity} {identity.name}".rstrip())
    except SenseictlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
