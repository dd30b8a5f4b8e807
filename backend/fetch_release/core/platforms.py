"""
Host platform detection and target triple mapping.
"""
import platform
from enum import Enum
from typing import Optional

from fetch_release.core.errors import UnsupportedPlatformError
from fetch_release.core.logger import setup_logger

logger = setup_logger(__name__)


class Platform(Enum):
    """Platforms with published binaries, valued by their target triple."""

    LINUX = "x86_64-unknown-linux-gnu"
    DARWIN = "x86_64-apple-darwin"

    @property
    def target_triple(self) -> str:
        return self.value


# platform.system() name -> Platform
SYSTEM_NAMES = {
    "Linux": Platform.LINUX,
    "Darwin": Platform.DARWIN,
}


def resolve_platform(system_name: Optional[str] = None) -> Platform:
    """
    Map an OS name to a supported Platform.

    Args:
        system_name: OS identifier as reported by ``uname`` (defaults to
            ``platform.system()``)

    Returns:
        Matching Platform

    Raises:
        UnsupportedPlatformError: for any OS without a published binary
    """
    if system_name is None:
        system_name = platform.system()

    resolved = SYSTEM_NAMES.get(system_name)
    if resolved is None:
        logger.debug(f"No binary published for system {system_name!r}")
        raise UnsupportedPlatformError(system_name)

    logger.debug(f"Platform {system_name} -> {resolved.target_triple}")
    return resolved


def target_triple(system_name: Optional[str] = None) -> str:
    """Target triple for the given (or current) OS."""
    return resolve_platform(system_name).target_triple
