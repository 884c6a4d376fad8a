"""
Registration use case — the engine behind install/remove/alias/unalias.

Wires the normalizer, the manifest store and the platform installer
together for both entity kinds:

    raw input → normalizer → installer (reconcile, check, write) → store
"""

from __future__ import annotations

import logging
from pathlib import Path

from lnb.core.config.loader import Settings
from lnb.core.errors import InvalidNameError
from lnb.core.installers.base import InstallReport, PlatformInstaller, RemoveReport
from lnb.core.installers.registry import create_installer
from lnb.core.models.entry import Entry, EntryKind
from lnb.core.persistence.manifest_store import ManifestStore

logger = logging.getLogger(__name__)

_NAME_FORBIDDEN = ("/", "\\")


class RegistrationEngine:
    """Install and remove binaries and aliases through one installer."""

    def __init__(self, installer: PlatformInstaller, store: ManifestStore):
        self.installer = installer
        self.store = store

    @classmethod
    def from_settings(cls, settings: Settings) -> RegistrationEngine:
        store = ManifestStore(settings.manifest_file())
        return cls(create_installer(settings, store), store)

    # ── Binaries ────────────────────────────────────────────────

    def install_binary(self, raw_path: str) -> InstallReport:
        source = self.installer.normalizer.normalize_binary(raw_path)
        logger.debug("Binary %s resolved to %s", raw_path, source)
        return self.installer.install_binary(source)

    def remove_binary(self, name_or_path: str) -> RemoveReport:
        """Remove by registered name, or by the path that was installed."""
        name = self.installer.binary_name(Path(name_or_path))
        validate_name(name)
        return self.installer.remove(name, EntryKind.BINARY)

    # ── Aliases ─────────────────────────────────────────────────

    def install_alias(self, name: str, command: str) -> InstallReport:
        validate_name(name)
        normalized = self.installer.normalizer.normalize(command)
        logger.debug("Alias %s: %r normalized to %r", name, command, normalized)
        return self.installer.install_alias(name, normalized, original=command)

    def remove_alias(self, name: str) -> RemoveReport:
        validate_name(name)
        return self.installer.remove(name, EntryKind.ALIAS)

    # ── Listing ─────────────────────────────────────────────────

    def list_entries(self) -> list[Entry]:
        return sorted(self.store.list(), key=lambda e: e.name)


def validate_name(name: str) -> None:
    if not name or not name.strip():
        raise InvalidNameError("Name cannot be empty.")
    if any(sep in name for sep in _NAME_FORBIDDEN) or name in (".", ".."):
        raise InvalidNameError(f"Invalid name '{name}': must be a plain file name.")
