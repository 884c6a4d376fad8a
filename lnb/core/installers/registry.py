"""
Installer registry — pick the platform strategy once, at startup.

Shared code never branches on the OS name; it receives whichever
PlatformInstaller this module hands out.
"""

from __future__ import annotations

import logging
import os
import sys

from lnb.core.config.loader import Settings
from lnb.core.errors import LnbError
from lnb.core.installers.base import PlatformInstaller
from lnb.core.installers.macos import MacInstaller
from lnb.core.installers.posix import DEFAULT_BIN_DIR, PosixInstaller
from lnb.core.installers.windows import WindowsInstaller, default_bin_dir
from lnb.core.persistence.manifest_store import ManifestStore

logger = logging.getLogger(__name__)


def detect_platform() -> str:
    """Map the running interpreter to 'linux', 'darwin' or 'windows'."""
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "darwin"
    if os.name == "posix":
        return "linux"
    raise LnbError(f"Unsupported operating system: {sys.platform}")


def create_installer(settings: Settings, store: ManifestStore) -> PlatformInstaller:
    """Build the installer for the configured (or detected) platform."""
    platform = settings.platform if settings.platform != "auto" else detect_platform()

    if platform == "windows":
        installer: PlatformInstaller = WindowsInstaller(
            settings.bin_dir or default_bin_dir(),
            store,
            manage_path=settings.manage_path,
        )
    elif platform == "darwin":
        installer = MacInstaller(settings.bin_dir or DEFAULT_BIN_DIR, store)
    else:
        installer = PosixInstaller(settings.bin_dir or DEFAULT_BIN_DIR, store)

    logger.debug("Using %r", installer)
    return installer
