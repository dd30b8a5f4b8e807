"""
Structured logging with DEBUG/INFO levels via LOG_LEVEL env var.
Uses RichHandler for clean, styled log output that doesn't interfere with progress bars.
"""

import os
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER_PREFIX = "fetch_release"


def _resolve_level(verbose: bool = False) -> int:
    log_level_str = os.getenv("LOG_LEVEL", "info").lower()
    verbose_mode = verbose or os.getenv("VERBOSE", "").lower() in ("1", "true", "yes")

    # In default mode only WARNING and above reach the terminal
    if not verbose_mode and log_level_str != "debug":
        return logging.WARNING
    return logging.DEBUG if log_level_str == "debug" else logging.INFO


def setup_logger(
    name: str = __name__, console: Optional[Console] = None, verbose: bool = False
) -> logging.Logger:
    """
    Set up structured logging with LOG_LEVEL env var support.

    Args:
        name: Logger name (typically __name__)
        console: Optional Rich Console instance (creates a stderr one if not provided)
        verbose: If True, show INFO logs even in default mode

    Returns:
        Configured logger instance
    """
    log_level = _resolve_level(verbose)

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Avoid adding multiple handlers if logger already configured
    if not logger.handlers:
        handler = RichHandler(
            console=console if console is not None else Console(stderr=True),
            rich_tracebacks=True,
            show_time=False,
            show_level=True,
            show_path=False,
            markup=False,
        )
        handler.setLevel(log_level)
        logger.addHandler(handler)
        # Handlers live on each module logger; don't duplicate through root
        logger.propagate = False

    return logger


def set_debug_logging(enabled: bool) -> None:
    """
    Apply --debug to every already-configured package logger.

    Module loggers are created at import time, before CLI flags are parsed,
    so the flag has to reach back and adjust their levels. Disabled restores
    the LOG_LEVEL/VERBOSE level.
    """
    level = logging.DEBUG if enabled else _resolve_level()
    for name, logger in logging.root.manager.loggerDict.items():
        if not name.startswith(PACKAGE_LOGGER_PREFIX):
            continue
        if not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
