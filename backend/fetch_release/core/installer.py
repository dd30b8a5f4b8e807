"""
Download, mark executable, and verify release binaries.

Binaries are processed one at a time in a fixed order; the first failure
aborts the run, so later binaries are never downloaded.
"""
import os
import stat
import subprocess
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, TYPE_CHECKING

from fetch_release import __version__
from fetch_release.core.config_manager import FetchSettings
from fetch_release.core.errors import ExecutionError, TransferError
from fetch_release.core.logger import setup_logger
from fetch_release.core.release_url import DownloadSpec, build_download_spec

if TYPE_CHECKING:
    from fetch_release.cli.output import FetchConsole

logger = setup_logger(__name__)

CHUNK_SIZE = 64 * 1024
USER_AGENT = f"fetch-release/{__version__}"

# (bytes_done, total_or_None)
ProgressCallback = Callable[[int, Optional[int]], None]


@dataclass
class InstallResult:
    """Outcome of installing one binary."""

    binary_name: str
    path: Path
    size: int
    mode: int
    url: str


def download(
    url: str,
    dest: Path,
    timeout: float = 60.0,
    progress_callback: Optional[ProgressCallback] = None,
) -> int:
    """
    GET a URL (following redirects) and write the body to dest.

    Args:
        url: Download URL
        dest: Output file, overwritten if present
        timeout: Socket timeout in seconds
        progress_callback: Called with (bytes_done, total) after each chunk

    Returns:
        Number of bytes written

    Raises:
        TransferError: on network error, timeout, or non-2xx status
    """
    req = urllib.request.Request(url)
    req.add_header("User-Agent", USER_AGENT)

    written = 0
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            length = response.headers.get("Content-Length")
            total = int(length) if length and length.isdigit() else None

            with open(dest, "wb") as f:
                while True:
                    chunk = response.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    f.write(chunk)
                    written += len(chunk)
                    if progress_callback:
                        progress_callback(written, total)
    except urllib.error.HTTPError as e:
        raise TransferError(url, f"HTTP {e.code} {e.reason}", status=e.code) from e
    except urllib.error.URLError as e:
        raise TransferError(url, str(e.reason)) from e
    except OSError as e:
        # timeouts and connection resets surface as plain OSError mid-read
        raise TransferError(url, str(e) or e.__class__.__name__) from e

    logger.debug(f"Downloaded {written} bytes from {url} to {dest}")
    return written


def make_executable(path: Path) -> int:
    """
    Add execute permission the way `chmod +x` does under a normal umask.

    The owner always gets +x; group and other get +x where they can read.

    Returns:
        The new mode
    """
    mode = os.stat(path).st_mode
    new_mode = mode | stat.S_IXUSR | ((mode & (stat.S_IRGRP | stat.S_IROTH)) >> 2)
    os.chmod(path, new_mode)
    logger.debug(f"chmod {stat.filemode(mode)} -> {stat.filemode(new_mode)} {path}")
    return new_mode


def describe_file(path: Path) -> str:
    """`ls -l`-style line: permissions, size, name."""
    st = os.stat(path)
    return f"{stat.filemode(st.st_mode)} {st.st_size:>10} {path.name}"


def run_version(path: Path) -> int:
    """
    Run `<binary> --version` with inherited stdout/stderr.

    Raises:
        ExecutionError: if the binary cannot be started or exits non-zero
    """
    # an absolute path keeps subprocess from searching PATH for a bare name
    executable = os.path.abspath(path)
    logger.debug(f"Running {executable} --version")
    try:
        result = subprocess.run([executable, "--version"], check=False)
    except OSError as e:
        raise ExecutionError(path.name, f"could not execute: {e.strerror or e}") from e

    if result.returncode != 0:
        code = result.returncode
        # killed by signal N: report the shell's 128+N
        exit_code = 128 - code if code < 0 else code
        raise ExecutionError(
            path.name, f"--version exited with status {code}", exit_code=exit_code
        )
    return result.returncode


class BinaryInstaller:
    """Installs the configured binaries for one target."""

    def __init__(
        self,
        settings: FetchSettings,
        target: str,
        console: Optional["FetchConsole"] = None,
    ):
        """
        Initialize BinaryInstaller.

        Args:
            settings: Resolved settings (repo, destination, timeout, binaries)
            target: Target triple
            console: Optional console for operator-facing output
        """
        self.settings = settings
        self.target = target
        self.console = console

    def plan(self, version_arg: Optional[str] = None) -> List[DownloadSpec]:
        """Resolve a DownloadSpec for every binary, in install order."""
        return [
            build_download_spec(
                self.settings.repo,
                binary_name,
                self.target,
                version_arg=version_arg,
                prefer_master=self.settings.prefer_master,
            )
            for binary_name in self.settings.binaries
        ]

    def install_one(self, spec: DownloadSpec) -> InstallResult:
        dest = self.settings.dest_dir / spec.binary_name

        if self.console:
            self.console.print_stage("download", spec.url)
            with self.console.download_progress(spec.binary_name) as progress_callback:
                size = download(spec.url, dest, self.settings.timeout, progress_callback)
        else:
            size = download(spec.url, dest, self.settings.timeout)

        mode = make_executable(dest)

        listing = describe_file(dest)
        if self.console:
            self.console.print_listing(listing)
        else:
            logger.info(listing)

        run_version(dest)

        if self.console:
            self.console.stage_ok("verify", spec.binary_name)

        return InstallResult(
            binary_name=spec.binary_name,
            path=dest,
            size=size,
            mode=mode,
            url=spec.url,
        )

    def install_all(self, version_arg: Optional[str] = None) -> List[InstallResult]:
        """
        Install every binary in order, stopping at the first failure.

        Raises:
            TransferError: download failed
            ExecutionError: binary did not run
        """
        self.settings.dest_dir.mkdir(parents=True, exist_ok=True)

        results = []
        for spec in self.plan(version_arg):
            results.append(self.install_one(spec))
        return results


def install_binaries(
    settings: FetchSettings,
    target: str,
    version_arg: Optional[str] = None,
    console: Optional["FetchConsole"] = None,
) -> List[InstallResult]:
    return BinaryInstaller(settings, target, console).install_all(version_arg)
