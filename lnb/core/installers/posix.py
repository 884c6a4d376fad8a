"""
POSIX installer — symlinks for binaries, bash scripts for aliases.

Launchers go into one directory (``/usr/local/bin`` by default) under
the registered name:

    lnb install ./build/mytool   →  /usr/local/bin/mytool -> /abs/build/mytool
    lnb alias logs tail -f x.log →  /usr/local/bin/logs  (bash script)
"""

from __future__ import annotations

import os
from pathlib import Path

from lnb.core.installers.base import PlatformInstaller
from lnb.core.services.normalizer import CommandNormalizer

DEFAULT_BIN_DIR = Path("/usr/local/bin")

ALIAS_SCRIPT = """#!/bin/bash
{command} "$@"
"""


class PosixInstaller(PlatformInstaller):
    """Linux (and other POSIX) launcher strategy."""

    @property
    def name(self) -> str:
        return "linux"

    @classmethod
    def default_normalizer(cls) -> CommandNormalizer:
        return CommandNormalizer(separators=("/",), require_executable=True)

    def binary_name(self, source: Path) -> str:
        return source.name

    def binary_target(self, name: str) -> Path:
        return self.bin_dir / name

    def alias_target(self, name: str) -> Path:
        return self.bin_dir / name

    def write_binary_launcher(self, source: Path, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        os.symlink(source, target)

    def render_alias_script(self, command: str) -> str:
        return ALIAS_SCRIPT.format(command=command)
