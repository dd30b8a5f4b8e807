"""
Error types raised while resolving, downloading and verifying release binaries.

Every error is fatal: the CLI prints a one-line summary and exits with
``exit_code``.
"""
from typing import Optional


class FetchReleaseError(Exception):
    """Base class for installer failures."""

    stage = "fetch"

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


class UnsupportedPlatformError(FetchReleaseError):
    """Host OS has no published binary."""

    stage = "platform"

    def __init__(self, system_name: str):
        super().__init__("machine architecture is currently unsupported")
        self.system_name = system_name


class TransferError(FetchReleaseError):
    """Download failed: network error, timeout, or non-2xx response."""

    stage = "download"

    def __init__(self, url: str, cause: str, status: Optional[int] = None):
        super().__init__(f"{url}: {cause}")
        self.url = url
        self.cause = cause
        self.status = status


class ExecutionError(FetchReleaseError):
    """Downloaded binary could not be started or `--version` returned non-zero."""

    stage = "verify"

    def __init__(self, binary: str, cause: str, exit_code: int = 1):
        super().__init__(f"{binary}: {cause}", exit_code=exit_code)
        self.binary = binary
