"""
Windows installer — batch wrappers in ``%USERPROFILE%\\bin``.

    lnb install C:\\tools\\mytool.exe  →  %USERPROFILE%\\bin\\mytool.cmd
    lnb alias ll "dir /w"              →  %USERPROFILE%\\bin\\ll.bat

The launcher directory only helps if it is on PATH. After each install
the installer checks for it and, when ``manage_path`` is on, appends it
to the persistent user PATH via PowerShell. Any failure here becomes a
warning on the report; the launcher itself is already in place.
"""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from lnb.core.installers.base import InstallReport, PlatformInstaller, write_launcher_file
from lnb.core.persistence.manifest_store import ManifestStore
from lnb.core.services.normalizer import CommandNormalizer

logger = logging.getLogger(__name__)

BINARY_WRAPPER = '@echo off\r\n"{source}" %*\r\n'
ALIAS_WRAPPER = "@echo off\r\n{command} %*\r\n"

# The directory travels through the environment, never through the script text.
_PS_GET_USER_PATH = "[Environment]::GetEnvironmentVariable('Path', 'User')"
_PS_ADD_USER_PATH = (
    "$current = [Environment]::GetEnvironmentVariable('Path', 'User'); "
    "$new = if ($current) { $current + ';' + $env:LNB_BIN_DIR } else { $env:LNB_BIN_DIR }; "
    "[Environment]::SetEnvironmentVariable('Path', $new, 'User')"
)
_PS_TIMEOUT = 30


def default_bin_dir() -> Path:
    profile = os.environ.get("USERPROFILE")
    return (Path(profile) if profile else Path.home()) / "bin"


class WindowsInstaller(PlatformInstaller):
    """Windows launcher strategy."""

    def __init__(
        self,
        bin_dir: Path,
        store: ManifestStore,
        normalizer: CommandNormalizer | None = None,
        manage_path: bool = False,
    ):
        super().__init__(bin_dir, store, normalizer)
        self.manage_path = manage_path

    @property
    def name(self) -> str:
        return "windows"

    @classmethod
    def default_normalizer(cls) -> CommandNormalizer:
        return CommandNormalizer(separators=("/", "\\"), require_executable=False)

    def binary_name(self, source: Path) -> str:
        return source.stem

    def binary_target(self, name: str) -> Path:
        return self.bin_dir / f"{name}.cmd"

    def alias_target(self, name: str) -> Path:
        return self.bin_dir / f"{name}.bat"

    def write_binary_launcher(self, source: Path, target: Path) -> None:
        write_launcher_file(target, BINARY_WRAPPER.format(source=source))

    def render_alias_script(self, command: str) -> str:
        return ALIAS_WRAPPER.format(command=command)

    # ── PATH handling ───────────────────────────────────────────

    def after_install(self, report: InstallReport) -> None:
        report.warnings.extend(self.ensure_on_path())

    def ensure_on_path(self) -> list[str]:
        """Make sure the launcher directory is reachable; return warnings."""
        bin_dir = str(self.bin_dir)
        if _contains_dir(os.environ.get("PATH", ""), bin_dir):
            return []

        if not self.manage_path:
            return [
                f"{bin_dir} is not on your PATH. Add it manually, "
                "or re-run with --add-to-path."
            ]

        try:
            if self.is_on_user_path():
                logger.info("%s is already in the user PATH", bin_dir)
                return []
            self.add_to_user_path()
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("Failed to update PATH: %s", e)
            return [
                f"Failed to automatically add {bin_dir} to PATH: {e}. "
                f"Please add it to your PATH environment variable manually."
            ]

        logger.info("Added %s to the user PATH", bin_dir)
        return [f"Added {bin_dir} to PATH. Restart your terminal to pick it up."]

    def is_on_user_path(self) -> bool:
        result = _powershell(_PS_GET_USER_PATH)
        return _contains_dir(result.stdout.strip(), str(self.bin_dir))

    def add_to_user_path(self) -> None:
        _powershell(_PS_ADD_USER_PATH, extra_env={"LNB_BIN_DIR": str(self.bin_dir)})


def _powershell(script: str, extra_env: dict[str, str] | None = None) -> subprocess.CompletedProcess:
    env = os.environ.copy()
    if extra_env:
        env.update(extra_env)
    return subprocess.run(
        ["powershell", "-NoProfile", "-Command", script],
        capture_output=True,
        text=True,
        timeout=_PS_TIMEOUT,
        env=env,
        check=True,
    )


def _contains_dir(path_value: str, directory: str) -> bool:
    """Case-insensitive PATH membership, ignoring trailing separators."""
    wanted = directory.rstrip("\\/").lower()
    return any(
        part.strip().rstrip("\\/").lower() == wanted
        for part in path_value.split(";")
        if part.strip()
    )
