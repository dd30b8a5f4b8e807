"""
Download URL resolution for release, latest and master builds.

Three URL shapes exist under the upstream repository:

    {repo}/raw/master-bin/{binary}-{target}
    {repo}/releases/download/{tag}/{binary}-{target}
    {repo}/releases/latest/download/{binary}-{target}
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fetch_release.core.logger import setup_logger

logger = setup_logger(__name__)

MASTER = "master"


class VersionKind(Enum):
    MASTER = "master"
    TAG = "tag"
    LATEST = "latest"


@dataclass(frozen=True)
class VersionSelector:
    kind: VersionKind
    tag: Optional[str] = None

    def __str__(self) -> str:
        if self.kind is VersionKind.TAG:
            return self.tag or ""
        return self.kind.value


@dataclass(frozen=True)
class DownloadSpec:
    """Where one binary comes from for one target."""

    binary_name: str
    target: str
    url: str

    @property
    def artifact_name(self) -> str:
        return artifact_name(self.binary_name, self.target)


def artifact_name(binary_name: str, target: str) -> str:
    return f"{binary_name}-{target}"


def select_version(version_arg: Optional[str], prefer_master: bool) -> VersionSelector:
    """
    Decide which build to fetch.

    Priority, first match wins:
      1. no argument with prefer_master set, or the literal "master"
      2. any other non-empty argument is a release tag
      3. latest release
    """
    if (not version_arg and prefer_master) or version_arg == MASTER:
        return VersionSelector(VersionKind.MASTER)
    if version_arg:
        return VersionSelector(VersionKind.TAG, tag=version_arg)
    return VersionSelector(VersionKind.LATEST)


def url_for(repo: str, selector: VersionSelector, binary_name: str, target: str) -> str:
    base = repo.rstrip("/")
    artifact = artifact_name(binary_name, target)

    if selector.kind is VersionKind.MASTER:
        return f"{base}/raw/master-bin/{artifact}"
    if selector.kind is VersionKind.TAG:
        return f"{base}/releases/download/{selector.tag}/{artifact}"
    return f"{base}/releases/latest/download/{artifact}"


def resolve_url(
    repo: str,
    binary_name: str,
    target: str,
    version_arg: Optional[str] = None,
    prefer_master: bool = False,
) -> str:
    """
    Compute the download URL for one binary.

    Args:
        repo: Upstream repository URL
        binary_name: Binary to fetch (e.g. "registry-cli")
        target: Target triple
        version_arg: Optional user-supplied tag or "master"
        prefer_master: Default to the master build when no argument is given

    Returns:
        Download URL
    """
    selector = select_version(version_arg, prefer_master)
    url = url_for(repo, selector, binary_name, target)
    logger.debug(f"Resolved {binary_name} ({selector}) -> {url}")
    return url


def build_download_spec(
    repo: str,
    binary_name: str,
    target: str,
    version_arg: Optional[str] = None,
    prefer_master: bool = False,
) -> DownloadSpec:
    return DownloadSpec(
        binary_name=binary_name,
        target=target,
        url=resolve_url(repo, binary_name, target, version_arg, prefer_master),
    )
