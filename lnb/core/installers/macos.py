"""
macOS installer — the POSIX strategy plus ``.app`` bundle support.

An alias whose command starts with an application bundle is rewritten
to go through ``open -a``, since a bundle is a directory and can't be
exec'd directly:

    lnb alias code "/Applications/Visual Studio Code.app"
        → open -a "/Applications/Visual Studio Code.app" "$@"
"""

from __future__ import annotations

from lnb.core.installers.posix import PosixInstaller
from lnb.core.services.normalizer import CommandNormalizer

BUNDLE_SUFFIX = ".app"
BUNDLE_LAUNCHER = ["open", "-a"]


class MacInstaller(PosixInstaller):
    """macOS launcher strategy."""

    @property
    def name(self) -> str:
        return "darwin"

    @classmethod
    def default_normalizer(cls) -> CommandNormalizer:
        return CommandNormalizer(
            separators=("/",),
            require_executable=True,
            bundle_suffix=BUNDLE_SUFFIX,
            bundle_launcher=BUNDLE_LAUNCHER,
        )
