"""
Settings loader — reads lnb's settings.yml into a typed model.

Resolution order for the settings file:
    --config flag  >  LNB_CONFIG env var  >  <home>/settings.yml

A missing file is fine (defaults apply). Environment overrides are
applied on top of whatever the file says:

    LNB_HOME       state directory (default ~/.lnb)
    LNB_MANIFEST   manifest JSON path (default <home>/config.json)
    LNB_BIN_DIR    launcher directory (default per platform)
    LNB_PLATFORM   auto | linux | darwin | windows
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.yml"
MANIFEST_FILE = "config.json"
DEFAULT_HOME_DIR = ".lnb"

PlatformName = Literal["auto", "linux", "darwin", "windows"]


class ConfigError(Exception):
    """Raised when the settings file is unreadable or invalid."""


class Settings(BaseModel):
    """Runtime settings.

    ``bin_dir`` left as ``None`` means "use the platform default",
    which the installer registry decides.
    """

    home: Path = Field(default_factory=lambda: Path.home() / DEFAULT_HOME_DIR)
    manifest_path: Path | None = None
    bin_dir: Path | None = None
    platform: PlatformName = "auto"
    manage_path: bool = False

    def manifest_file(self) -> Path:
        return self.manifest_path or self.home / MANIFEST_FILE


def default_settings_path() -> Path:
    home = os.environ.get("LNB_HOME")
    base = Path(home).expanduser() if home else Path.home() / DEFAULT_HOME_DIR
    return base / SETTINGS_FILE


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from YAML and apply environment overrides.

    Args:
        path: Explicit settings file. If None, uses LNB_CONFIG or the
            default location under the lnb home directory.

    Returns:
        Validated Settings model.

    Raises:
        ConfigError: If an explicitly given file is missing, or any
            settings file is unreadable or invalid.
    """
    explicit = path is not None
    if path is None:
        env_path = os.environ.get("LNB_CONFIG")
        if env_path:
            path, explicit = Path(env_path).expanduser(), True
        else:
            path = default_settings_path()

    data: dict = {}
    if path.is_file():
        data = _read_yaml(path)
    elif explicit:
        raise ConfigError(f"Settings file not found: {path}")
    else:
        logger.debug("No settings file at %s — using defaults", path)

    data.update(_env_overrides())

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

    settings.home = settings.home.expanduser()
    if settings.manifest_path is not None:
        settings.manifest_path = settings.manifest_path.expanduser()
    if settings.bin_dir is not None:
        settings.bin_dir = settings.bin_dir.expanduser()

    logger.debug("Settings: %s", settings.model_dump(mode="json"))
    return settings


def _read_yaml(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _env_overrides() -> dict[str, str]:
    overrides = {}
    for env_name, key in (
        ("LNB_HOME", "home"),
        ("LNB_MANIFEST", "manifest_path"),
        ("LNB_BIN_DIR", "bin_dir"),
        ("LNB_PLATFORM", "platform"),
    ):
        value = os.environ.get(env_name)
        if value:
            overrides[key] = value
    return overrides
