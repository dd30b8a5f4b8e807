"""
Root Typer app for the fetch-release CLI.
"""
from pathlib import Path
from typing import Optional

import typer

from fetch_release import __version__
from fetch_release.cli.output import FetchConsole
from fetch_release.core.config_manager import ConfigManager
from fetch_release.core.errors import FetchReleaseError, UnsupportedPlatformError
from fetch_release.core.installer import BinaryInstaller
from fetch_release.core.logger import set_debug_logging, setup_logger
from fetch_release.core.platforms import target_triple

logger = setup_logger(__name__)

APP_NAME = "fetch-release"

app = typer.Typer(
    name=APP_NAME,
    help="Install prebuilt stake-o-matic binaries for this machine",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"{APP_NAME} {__version__}")
        raise typer.Exit()


@app.command()
def fetch(
    version_arg: Optional[str] = typer.Argument(
        None,
        metavar="VERSION",
        help="Release tag to install, or 'master' for the latest master build. "
        "Defaults to the latest release.",
    ),
    dest: Optional[Path] = typer.Option(
        None,
        "--dest",
        "-d",
        file_okay=False,
        help="Directory to install into (default: current directory)",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print download URLs without fetching anything"
    ),
    master_default: bool = typer.Option(
        False,
        "--master-default",
        help="Without VERSION, install the master build instead of the latest release "
        "(same as setting DEFAULT_TO_MASTER to any non-empty value, even 0)",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    plain: bool = typer.Option(False, "--plain", help="Disable colors and progress bars"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        help="Show version and exit",
        is_eager=True,
    ),
) -> None:
    """
    Download solana-stake-o-matic and registry-cli for this platform.

    Each binary is written to the destination directory, marked executable,
    listed, and run with --version. The first failure stops the run.
    """
    set_debug_logging(debug)

    console = FetchConsole(plain=plain)

    config = ConfigManager()
    settings = config.load_settings(
        dest=dest, prefer_master=True if master_default else None
    )

    try:
        target = target_triple()
    except UnsupportedPlatformError as e:
        console.print_failure(e.stage, str(e))
        raise typer.Exit(code=e.exit_code)

    installer = BinaryInstaller(settings, target, console=console)

    if dry_run:
        for spec in installer.plan(version_arg):
            console.print_stage("resolve", f"{spec.binary_name} <- {spec.url}")
        return

    try:
        results = installer.install_all(version_arg)
    except FetchReleaseError as e:
        logger.debug(f"{e.stage} failed", exc_info=True)
        console.print_failure(e.stage, str(e))
        raise typer.Exit(code=e.exit_code)

    console.print_complete(results)
