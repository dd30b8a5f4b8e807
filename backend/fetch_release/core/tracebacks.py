"""
Rich traceback handler and short error summaries.

Locals are hidden in tracebacks unless FETCH_RELEASE_TRACEBACK_LOCALS=1,
since the environment may carry tokens.
"""
import os
import re
from typing import Optional

from rich.console import Console
from rich.traceback import install as install_rich_traceback

SECRET_PATTERN = re.compile(r"(?i)\b(key|token|password|secret)=([^\s&]+)")


def install_traceback_handler(debug: bool = False) -> None:
    """
    Install Rich traceback handler globally.

    Args:
        debug: If True, show extra context lines around each frame.
    """
    console = Console(stderr=True)

    show_locals = os.getenv("FETCH_RELEASE_TRACEBACK_LOCALS", "").lower() in ("1", "true", "yes")

    if show_locals:
        console.print(
            "[dim yellow]Warning: Traceback locals display is enabled. "
            "Secrets may be visible in error output.[/dim yellow]"
        )

    install_rich_traceback(
        console=console,
        show_locals=show_locals,
        locals_max_length=10 if show_locals else 0,
        locals_max_string=80 if show_locals else 0,
        width=None,
        extra_lines=3 if debug else 1,
        word_wrap=True,
    )


def mask_secrets(message: str) -> str:
    """Replace values of key=/token=/password=/secret= pairs with ***."""
    return SECRET_PATTERN.sub(lambda m: f"{m.group(1)}=***", message)


def print_error_summary(
    stage: str,
    error: Exception,
    console: Optional[Console] = None
) -> None:
    """
    Print a short summary for an unexpected error.

    Full tracebacks are shown in debug mode instead.

    Args:
        stage: Where the error occurred (e.g., "main", "download")
        error: The exception that was raised
        console: Optional Console instance (defaults to stderr)
    """
    if console is None:
        console = Console(stderr=True)

    error_msg = mask_secrets(str(error) or error.__class__.__name__)

    console.print(f"<x> {stage} | failed", style="bold red", markup=False)
    console.print(f"    cause: {error_msg}", style="red", markup=False)

    if os.getenv("LOG_LEVEL", "").lower() != "debug":
        console.print("[dim]    run with --debug for full traceback[/dim]")
