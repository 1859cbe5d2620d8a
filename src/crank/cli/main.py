#!/usr/bin/env python3
"""
crank CLI - Playdate build and deploy
=====================================

Usage:
    crank [OPTIONS] COMMAND [ARGS]

Commands:
    build    - Build a .pdx bundle for the device or the simulator
    run      - Build, then launch on the device or in the simulator
    package  - Build release bundles for both targets and zip them

Exit Codes:
    0    - Success
    1    - General or filesystem error
    2    - External tool failure
    3    - Device deployment failure
    4    - Configuration error
    130  - Interrupted
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from crank import __version__
from crank.errors import CrankError

from .utils import Session, make_build_config, setup_logging

app = typer.Typer(
    name="crank",
    help="Build and deploy Playdate games written in Rust",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"crank {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Only log errors"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Also append logs to this file"
    ),
    log_json: bool = typer.Option(
        False, "--log-json",
        help="Log one JSON object per line"
    ),
    manifest_path: Optional[Path] = typer.Option(
        None, "--manifest-path",
        help="Path to Cargo.toml (defaults to the current directory's)"
    ),
    device_timeout: Optional[float] = typer.Option(
        None, "--device-timeout",
        help="Seconds to wait for each device mode switch (default: forever, or CRANK_DEVICE_TIMEOUT)"
    ),
    version: bool = typer.Option(
        False, "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
):
    """crank: build and deploy Playdate games."""
    setup_logging(verbose, quiet, log_file, log_json)
    ctx.obj = {"manifest_path": manifest_path, "device_timeout": device_timeout}


def _execute(ctx: typer.Context, action: Callable[[Session], None]) -> None:
    """Run ``action`` and turn failures into exit codes."""
    try:
        session = Session.create(**(ctx.obj or {}))
        action(session)
    except CrankError as e:
        err_console.print(f"[red]✗ {type(e).__name__}:[/red] {escape(str(e))}", highlight=False)
        raise typer.Exit(code=e.exit_code)
    except KeyboardInterrupt:
        err_console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(code=130)


def _build(
    ctx: typer.Context,
    device: bool,
    release: bool,
    example: Optional[str],
    features: List[str],
    clean: bool,
    run: bool,
) -> None:
    def action(session: Session) -> None:
        config = make_build_config(device, release, example, features)
        result = session.pipeline(config, deployable=run).run(clean=clean, deploy=run)
        console.print(Panel.fit(
            f"[bold]{escape(result.title)}[/bold]\n"
            f"Target: {config.target_kind.value} ({config.profile.value})\n"
            f"Bundle: {result.pdx_path}",
            title="📦 Build",
            border_style="green",
        ))

    _execute(ctx, action)


@app.command()
def build(
    ctx: typer.Context,
    device: bool = typer.Option(
        False, "--device",
        help="Build for the Playdate device instead of the simulator"
    ),
    release: bool = typer.Option(
        False, "--release",
        help="Build artifacts in release mode, with optimizations"
    ),
    example: Optional[str] = typer.Option(
        None, "--example",
        help="Build a specific example from the examples/ dir"
    ),
    features: List[str] = typer.Option(
        [], "--features", "-F",
        help="Cargo features to enable (comma separated, repeatable)"
    ),
    clean: bool = typer.Option(
        False, "--clean",
        help="Run cargo clean first"
    ),
    run: bool = typer.Option(
        False, "--run",
        help="Launch the bundle after building"
    ),
):
    """
    Build a .pdx bundle targeting the Playdate device or Simulator.
    """
    _build(ctx, device, release, example, features, clean, run)


@app.command("run")
def run_cmd(
    ctx: typer.Context,
    device: bool = typer.Option(
        False, "--device",
        help="Deploy to the Playdate device instead of the simulator"
    ),
    release: bool = typer.Option(
        False, "--release",
        help="Build artifacts in release mode, with optimizations"
    ),
    example: Optional[str] = typer.Option(
        None, "--example",
        help="Run a specific example from the examples/ dir"
    ),
    features: List[str] = typer.Option(
        [], "--features", "-F",
        help="Cargo features to enable (comma separated, repeatable)"
    ),
    clean: bool = typer.Option(
        False, "--clean",
        help="Run cargo clean first"
    ),
):
    """
    Build, then launch in the simulator or on a connected device.

    Device runs switch the Playdate into disk mode, copy the bundle to
    /Games, eject and start it.
    """
    _build(ctx, device, release, example, features, clean, True)


@app.command()
def package(
    ctx: typer.Context,
    example: Optional[str] = typer.Option(
        None, "--example",
        help="Package a specific example from the examples/ dir"
    ),
    features: List[str] = typer.Option(
        [], "--features", "-F",
        help="Cargo features to enable (comma separated, repeatable)"
    ),
    clean: bool = typer.Option(
        False, "--clean",
        help="Run cargo clean first"
    ),
    reveal: bool = typer.Option(
        False, "--reveal",
        help="Show the archive in the file browser when done"
    ),
):
    """
    Build release bundles for device and simulator and zip them.

    Produces target/<Title>.pdx.zip, replacing any earlier archive.
    """
    def action(session: Session) -> None:
        config = make_build_config(False, True, example, features)
        archive = session.packager().package(config, clean=clean, reveal=reveal)
        console.print(Panel.fit(
            f"[bold]Release package ready[/bold]\n\n"
            f"Archive: {archive}",
            title="🚀 Package",
            border_style="green",
        ))

    _execute(ctx, action)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
