"""
Shared fixtures: isolate tests from the caller's environment and .env files.
"""
import pytest

CONFIG_VARS = (
    "DEFAULT_TO_MASTER",
    "FETCH_RELEASE_REPO",
    "FETCH_RELEASE_TIMEOUT",
    "FETCH_RELEASE_CONFIG_DIR",
    "NO_COLOR",
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    for var in CONFIG_VARS:
        monkeypatch.delenv(var, raising=False)
    # no .env discovery from the checkout
    monkeypatch.chdir(tmp_path)
    return tmp_path
