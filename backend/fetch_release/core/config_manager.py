"""
Configuration from .env files and the process environment.

Values are read once into a FetchSettings instance that is passed down
explicitly; nothing below the CLI layer consults os.environ.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Tuple

from dotenv import dotenv_values, find_dotenv

from .logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_REPO = "https://github.com/solana-labs/stake-o-matic"
DEFAULT_TIMEOUT = 60.0
BINARIES: Tuple[str, ...] = ("solana-stake-o-matic", "registry-cli")

CONFIG_DIR_ENV = "FETCH_RELEASE_CONFIG_DIR"


@dataclass(frozen=True)
class FetchSettings:
    """Resolved settings for one installer run."""

    repo: str = DEFAULT_REPO
    prefer_master: bool = False
    dest_dir: Path = field(default_factory=Path.cwd)
    timeout: float = DEFAULT_TIMEOUT
    binaries: Tuple[str, ...] = BINARIES


def get_config_location() -> Optional[Path]:
    """
    Locate the .env file to read.

    FETCH_RELEASE_CONFIG_DIR wins; otherwise search upwards from the
    current directory.
    """
    config_dir = os.getenv(CONFIG_DIR_ENV)
    if config_dir:
        return Path(config_dir).expanduser() / ".env"

    env_file = find_dotenv(usecwd=True)
    if env_file:
        return Path(env_file)
    return None


class ConfigManager:
    """Reads settings from a .env file, with the process environment taking precedence."""

    def __init__(self, env_path: Optional[str] = None):
        """
        Initialize ConfigManager.

        Args:
            env_path: Path to .env file (defaults to get_config_location())
        """
        self.env_path = Path(env_path) if env_path else get_config_location()
        self.values: Dict[str, Optional[str]] = {}

        if self.env_path is not None and self.env_path.exists():
            self.values = dict(dotenv_values(self.env_path))
            logger.debug(f"Loaded {len(self.values)} value(s) from {self.env_path}")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value.

        Args:
            key: Variable name
            default: Default value if unset or empty

        Returns:
            Value from the environment, then .env, then default
        """
        value = os.getenv(key)
        if value is None:
            value = self.values.get(key)
        if value is None or value.strip() == "":
            return default
        return value.strip()

    def is_set(self, key: str) -> bool:
        """
        Set/unset toggle: any non-empty value counts as set, including "0".
        """
        return self.get(key) is not None

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Ignoring invalid {key}={value!r}, using {default}")
            return default

    def load_settings(
        self,
        dest: Optional[Path] = None,
        prefer_master: Optional[bool] = None,
    ) -> FetchSettings:
        """
        Build FetchSettings, with explicit arguments overriding configuration.

        Args:
            dest: Directory to install into (default: current directory)
            prefer_master: Overrides DEFAULT_TO_MASTER when not None

        Returns:
            FetchSettings
        """
        if prefer_master is None:
            prefer_master = self.is_set("DEFAULT_TO_MASTER")

        settings = FetchSettings(
            repo=self.get("FETCH_RELEASE_REPO", DEFAULT_REPO),
            prefer_master=prefer_master,
            dest_dir=Path(dest).expanduser().resolve() if dest is not None else Path.cwd(),
            timeout=self.get_float("FETCH_RELEASE_TIMEOUT", DEFAULT_TIMEOUT),
        )
        logger.debug(f"Settings: {settings}")
        return settings
