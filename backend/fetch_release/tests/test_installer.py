"""
Tests for the download/chmod/verify pipeline (public-safe, no network).

Transfers are simulated by patching urlopen or the module-level download();
`--version` runs a small shell script standing in for the real binary.
"""
import io
import os
import stat
import sys
import urllib.error
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fetch_release.cli.output import FetchConsole  # noqa: E402
from fetch_release.core.config_manager import FetchSettings  # noqa: E402
from fetch_release.core.errors import ExecutionError, TransferError  # noqa: E402
from fetch_release.core.installer import (  # noqa: E402
    BinaryInstaller,
    describe_file,
    download,
    install_binaries,
    make_executable,
    run_version,
)

posix_only = pytest.mark.skipif(os.name == "nt", reason="needs a POSIX shell")

LINUX = "x86_64-unknown-linux-gnu"
REPO = "https://github.com/solana-labs/stake-o-matic"

FAKE_BINARY = b"#!/bin/sh\necho \"$(basename \"$0\") 0.1.0\"\n"
BROKEN_BINARY = b"#!/bin/sh\nexit 3\n"


class _FakeResponse(io.BytesIO):
    def __init__(self, data: bytes):
        super().__init__(data)
        self.headers = {"Content-Length": str(len(data))}


def _fake_download(body: bytes = FAKE_BINARY):
    calls = []

    def fake(url, dest, timeout=60.0, progress_callback=None):
        calls.append(url)
        Path(dest).write_bytes(body)
        return len(body)

    return fake, calls


def _settings(dest: Path) -> FetchSettings:
    return FetchSettings(repo=REPO, prefer_master=False, dest_dir=dest, timeout=5.0)


class TestDownload:
    def test_writes_body_and_reports_progress(self, tmp_path):
        dest = tmp_path / "registry-cli"
        dest.write_bytes(b"stale contents that are longer than the new body")
        seen = []

        with patch(
            "fetch_release.core.installer.urllib.request.urlopen",
            return_value=_FakeResponse(b"new-binary"),
        ) as mock_urlopen:
            written = download(
                "https://example.invalid/x", dest, 5.0, lambda done, total: seen.append((done, total))
            )

        assert written == len(b"new-binary")
        assert dest.read_bytes() == b"new-binary"
        assert seen[-1] == (10, 10)
        request = mock_urlopen.call_args[0][0]
        assert request.full_url == "https://example.invalid/x"
        assert mock_urlopen.call_args[1]["timeout"] == 5.0

    def test_http_error_raises_transfer_error(self, tmp_path):
        err = urllib.error.HTTPError("https://example.invalid/x", 404, "Not Found", {}, None)
        with patch("fetch_release.core.installer.urllib.request.urlopen", side_effect=err):
            with pytest.raises(TransferError) as exc_info:
                download("https://example.invalid/x", tmp_path / "x")
        assert exc_info.value.status == 404
        assert "404" in str(exc_info.value)
        assert exc_info.value.exit_code == 1

    def test_network_error_raises_transfer_error(self, tmp_path):
        err = urllib.error.URLError("Name or service not known")
        with patch("fetch_release.core.installer.urllib.request.urlopen", side_effect=err):
            with pytest.raises(TransferError) as exc_info:
                download("https://example.invalid/x", tmp_path / "x")
        assert "Name or service not known" in str(exc_info.value)

    def test_timeout_raises_transfer_error(self, tmp_path):
        with patch(
            "fetch_release.core.installer.urllib.request.urlopen",
            side_effect=TimeoutError("timed out"),
        ):
            with pytest.raises(TransferError):
                download("https://example.invalid/x", tmp_path / "x")


class TestPermissions:
    @posix_only
    def test_make_executable_follows_read_bits(self, tmp_path):
        path = tmp_path / "bin"
        path.write_bytes(b"x")
        os.chmod(path, 0o644)

        mode = make_executable(path)

        assert stat.S_IMODE(mode) == 0o755
        assert os.access(path, os.X_OK)

    @posix_only
    def test_make_executable_keeps_private_files_private(self, tmp_path):
        path = tmp_path / "bin"
        path.write_bytes(b"x")
        os.chmod(path, 0o600)

        assert stat.S_IMODE(make_executable(path)) == 0o700

    @posix_only
    def test_describe_file_looks_like_ls(self, tmp_path):
        path = tmp_path / "registry-cli"
        path.write_bytes(b"12345")
        os.chmod(path, 0o755)

        line = describe_file(path)

        assert line.startswith("-rwxr-xr-x")
        assert line.split()[1] == "5"
        assert line.endswith(" registry-cli")


@posix_only
class TestRunVersion:
    def test_success(self, tmp_path):
        path = tmp_path / "registry-cli"
        path.write_bytes(FAKE_BINARY)
        make_executable(path)
        assert run_version(path) == 0

    def test_nonzero_exit_raises_with_code(self, tmp_path):
        path = tmp_path / "registry-cli"
        path.write_bytes(BROKEN_BINARY)
        make_executable(path)
        with pytest.raises(ExecutionError) as exc_info:
            run_version(path)
        assert exc_info.value.exit_code == 3

    def test_not_executable_format_raises(self, tmp_path):
        path = tmp_path / "registry-cli"
        path.write_bytes(b"\x00\x01 not an executable")
        make_executable(path)
        with pytest.raises(ExecutionError) as exc_info:
            run_version(path)
        assert exc_info.value.exit_code == 1


@posix_only
class TestInstallBinaries:
    def test_end_to_end_latest_release_on_linux(self, tmp_path):
        fake, calls = _fake_download()
        with patch("fetch_release.core.installer.download", side_effect=fake):
            results = install_binaries(_settings(tmp_path), LINUX)

        assert calls == [
            f"{REPO}/releases/latest/download/solana-stake-o-matic-{LINUX}",
            f"{REPO}/releases/latest/download/registry-cli-{LINUX}",
        ]
        assert [r.binary_name for r in results] == ["solana-stake-o-matic", "registry-cli"]
        for result in results:
            assert result.path == tmp_path / result.binary_name
            assert os.access(result.path, os.X_OK)

    def test_failed_first_transfer_skips_second_binary(self, tmp_path):
        with patch(
            "fetch_release.core.installer.download",
            side_effect=TransferError("https://example.invalid", "HTTP 404 Not Found", status=404),
        ) as mock_download:
            with pytest.raises(TransferError):
                install_binaries(_settings(tmp_path), LINUX, "v9.9.9")

        assert mock_download.call_count == 1
        assert not (tmp_path / "registry-cli").exists()

    def test_failed_version_check_skips_second_binary(self, tmp_path):
        fake, calls = _fake_download(BROKEN_BINARY)
        with patch("fetch_release.core.installer.download", side_effect=fake):
            with pytest.raises(ExecutionError):
                install_binaries(_settings(tmp_path), LINUX, "master")

        assert calls == [f"{REPO}/raw/master-bin/solana-stake-o-matic-{LINUX}"]
        assert not (tmp_path / "registry-cli").exists()

    def test_creates_destination_and_prints_listing(self, tmp_path, capsys):
        fake, _ = _fake_download()
        dest = tmp_path / "nested" / "bin"
        installer = BinaryInstaller(_settings(dest), LINUX, console=FetchConsole(plain=True))

        with patch("fetch_release.core.installer.download", side_effect=fake):
            installer.install_all("v1.0.0")

        out = capsys.readouterr().out
        assert (dest / "registry-cli").exists()
        assert "-rwx" in out
        assert "releases/download/v1.0.0/registry-cli" in out

    def test_plan_honours_master_preference(self, tmp_path):
        settings = FetchSettings(repo=REPO, prefer_master=True, dest_dir=tmp_path)
        urls = [spec.url for spec in BinaryInstaller(settings, LINUX).plan()]
        assert urls == [
            f"{REPO}/raw/master-bin/solana-stake-o-matic-{LINUX}",
            f"{REPO}/raw/master-bin/registry-cli-{LINUX}",
        ]


@posix_only
def test_run_version_with_bare_name_ignores_path(tmp_path, monkeypatch):
    decoys = tmp_path / "decoys"
    decoys.mkdir()
    decoy = decoys / "registry-cli"
    decoy.write_text("#!/bin/sh\nexit 9\n")
    decoy.chmod(0o755)
    monkeypatch.setenv("PATH", f"{decoys}{os.pathsep}{os.environ.get('PATH', '')}")

    local = tmp_path / "registry-cli"
    local.write_bytes(FAKE_BINARY)
    make_executable(local)
    monkeypatch.chdir(tmp_path)

    assert run_version(Path("registry-cli")) == 0
