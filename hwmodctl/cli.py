"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import json
import logging

import typer

from hwmodctl.core.errors import HwmodctlError, SettingsError
from hwmodctl.core.model import HardwareConfig, ModuleRequest
from hwmodctl.core.service import ModuleService, read_config
from hwmodctl.core.settings import Settings, load_settings
from hwmodctl.transports.http_encryption import HttpEncryptionGateway

app = typer.Typer(help="Download and install versioned hardware modules")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline progress to stderr"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _echo_config(config: HardwareConfig) -> None:
    typer.echo(json.dumps(config.to_dict(), indent=2, sort_keys=True))


async def _fetch(settings: Settings, request: ModuleRequest) -> HardwareConfig:
    if not settings.encryption_url:
        raise SettingsError(
            "No encryption_url configured. Set it in the settings file or via HWMODCTL_ENCRYPTION_URL."
        )
    service = ModuleService(settings)
    gateway = HttpEncryptionGateway(settings.encryption_url, timeout_s=settings.timeout_s)
    try:
        return await service.acquire(request, gateway)
    finally:
        await gateway.aclose()
        await service.aclose()


@app.command("fetch")
def fetch_module(name: str, version: str) -> None:
    """Download, extract, and install a module, then print its config."""
    try:
        settings = load_settings()
        config = asyncio.run(_fetch(settings, ModuleRequest(name=name, version=version)))
        _echo_config(config)
    except HwmodctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: module config for '{name}' is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("show")
def show_module(name: str) -> None:
    """Print the config of a module that is already extracted locally."""
    try:
        _echo_config(read_config(load_settings().layout, name))
    except HwmodctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    except json.JSONDecodeError as exc:
        typer.echo(f"Error: module config for '{name}' is not valid JSON: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("paths")
def show_paths() -> None:
    """Print the resolved module directories."""
    try:
        layout = load_settings().layout
    except HwmodctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None
    typer.echo(f"module root: {layout.module_root}")
    typer.echo(f"modules: {layout.modules}")
    typer.echo(f"block modules: {layout.block_modules}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
