"""
Platform installer base — the contract every OS variant implements.

An installer owns one launcher directory. It turns a validated binary
path or a normalized alias command into a launcher artifact in that
directory and records it in the manifest store.

Every install runs the same sequence:

    reconcile stale entry → reject live duplicate → reject occupied
    target → write artifact → record entry + save manifest

The artifact is always written before the manifest is saved, so a crash
in between leaves an orphan file, never a manifest entry pointing at
nothing. Manifest save failures after the artifact exists are reported
as warnings, not errors.

To add a platform:
    1. Subclass PlatformInstaller
    2. Implement the target/launcher hooks
    3. Map it in installers/registry.py
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from lnb.core.errors import (
    AlreadyInstalledError,
    FilesystemError,
    NotInstalledError,
    TargetExistsError,
    TargetMismatchError,
)
from lnb.core.models.entry import Entry, EntryKind
from lnb.core.persistence.manifest_store import ManifestStore
from lnb.core.services.normalizer import CommandNormalizer

logger = logging.getLogger(__name__)

# CLI verb that undoes each kind, used in error hints
_REMOVE_VERB = {EntryKind.BINARY: "remove", EntryKind.ALIAS: "unalias"}


@dataclass
class InstallReport:
    """Outcome of a successful install."""

    name: str
    kind: EntryKind
    source: str
    target: str
    command: str | None = None      # normalized command written into an alias launcher
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "source": self.source,
            "target": self.target,
            "command": self.command,
            "warnings": self.warnings,
        }


@dataclass
class RemoveReport:
    """Outcome of a successful remove."""

    name: str
    kind: EntryKind
    target: str
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "target": self.target,
            "warnings": self.warnings,
        }


class PlatformInstaller(ABC):
    """Abstract base class for the per-OS launcher strategies."""

    def __init__(
        self,
        bin_dir: Path,
        store: ManifestStore,
        normalizer: CommandNormalizer | None = None,
    ):
        self.bin_dir = bin_dir
        self.store = store
        self.normalizer = normalizer or self.default_normalizer()

    @property
    @abstractmethod
    def name(self) -> str:
        """Platform identifier ('linux', 'darwin', 'windows')."""

    @classmethod
    @abstractmethod
    def default_normalizer(cls) -> CommandNormalizer:
        """Normalizer configured for this platform's path rules."""

    @abstractmethod
    def binary_name(self, source: Path) -> str:
        """Launcher name under which ``source`` is registered."""

    @abstractmethod
    def binary_target(self, name: str) -> Path:
        """Launcher path for a binary registered as ``name``."""

    @abstractmethod
    def alias_target(self, name: str) -> Path:
        """Launcher path for an alias registered as ``name``."""

    @abstractmethod
    def write_binary_launcher(self, source: Path, target: Path) -> None:
        """Create the artifact that makes ``source`` callable as ``target``."""

    @abstractmethod
    def render_alias_script(self, command: str) -> str:
        """Launcher body that runs ``command`` with forwarded arguments."""

    def write_alias_launcher(self, command: str, target: Path) -> None:
        write_launcher_file(target, self.render_alias_script(command))

    def after_install(self, report: InstallReport) -> None:
        """Hook for best-effort follow-ups. Must not raise."""

    def target_for(self, name: str, kind: EntryKind) -> Path:
        if kind is EntryKind.ALIAS:
            return self.alias_target(name)
        return self.binary_target(name)

    # ── Install ─────────────────────────────────────────────────

    def install_binary(self, source: Path) -> InstallReport:
        """Register an absolute, already-validated binary path."""
        name = self.binary_name(source)
        target = self.binary_target(name)
        report = InstallReport(
            name=name, kind=EntryKind.BINARY, source=str(source), target=str(target)
        )
        self._install(
            report,
            create=lambda: self.write_binary_launcher(source, target),
            entry=Entry.for_binary(name, str(source), str(target)),
        )
        logger.info("Installed: %s -> %s", target, source)
        return report

    def install_alias(self, name: str, command: str, original: str) -> InstallReport:
        """Register ``name`` to run the normalized ``command``.

        ``original`` is what the user typed; it is what the manifest
        records, while the launcher runs the normalized form.
        """
        target = self.alias_target(name)
        report = InstallReport(
            name=name,
            kind=EntryKind.ALIAS,
            source=original,
            target=str(target),
            command=command,
        )
        self._install(
            report,
            create=lambda: self.write_alias_launcher(command, target),
            entry=Entry.for_alias(name, original, str(target)),
        )
        logger.info("Created alias: %s -> %s", name, command)
        return report

    def _install(self, report: InstallReport, create: Callable[[], None], entry: Entry) -> None:
        name, kind, target = report.name, report.kind, report.target

        stale = self.store.reconcile(name)
        if stale:
            report.warnings.append(stale)

        if self.store.get(name) is not None:
            verb = _REMOVE_VERB[kind]
            raise AlreadyInstalledError(
                f"{kind.value} '{name}' is already installed. "
                f"Use 'lnb {verb} {name}' first to reinstall"
            )

        owner = self.store.find_by_target(target)
        if owner is not None:
            raise TargetExistsError(
                f"Launcher path {target} is already recorded for '{owner.name}'."
            )

        if os.path.lexists(target):
            raise TargetExistsError(
                f"File already exists at {target}. Please remove it manually "
                f"or use 'lnb {_REMOVE_VERB[kind]} {name}' if it was installed by LNB"
            )

        try:
            create()
        except (OSError, UnicodeError) as e:
            raise FilesystemError(f"Failed to install {kind.value} '{name}': {e}") from e

        self.store.put(entry)
        self._save_quietly(report.warnings)
        self.after_install(report)

    # ── Remove ──────────────────────────────────────────────────

    def remove(self, name: str, kind: EntryKind) -> RemoveReport:
        """Delete the launcher for ``name`` and forget the entry.

        Raises:
            NotInstalledError: No entry of this kind exists.
            TargetMismatchError: The recorded launcher isn't where this
                platform would put it.
            FilesystemError: The launcher could not be deleted; the
                manifest is left untouched.
        """
        entry = self.store.get(name)
        if entry is None:
            raise NotInstalledError(f"{kind.value} '{name}' was not installed by LNB")
        if entry.kind is not kind:
            raise NotInstalledError(
                f"'{name}' is registered as {entry.kind.value}, not {kind.value}. "
                f"Use 'lnb {_REMOVE_VERB[entry.kind]} {name}' instead"
            )

        expected = self.target_for(name, kind)
        if entry.target_path != str(expected):
            raise TargetMismatchError(
                f"{kind.value} '{name}' target path mismatch: "
                f"expected {expected}, found {entry.target_path}"
            )

        report = RemoveReport(name=name, kind=kind, target=str(expected))
        try:
            os.remove(expected)
        except FileNotFoundError:
            message = f"Launcher {expected} was already gone; dropping the manifest entry."
            logger.warning(message)
            report.warnings.append(message)
        except OSError as e:
            raise FilesystemError(f"Failed to remove {kind.value} '{name}': {e}") from e

        self.store.delete(name)
        self._save_quietly(report.warnings)
        logger.info("Removed: %s", expected)
        return report

    def _save_quietly(self, warnings: list[str]) -> None:
        try:
            self.store.save()
        except (OSError, UnicodeError) as e:
            message = f"Failed to update manifest {self.store.path}: {e}. It may now be out of sync."
            logger.warning(message)
            warnings.append(message)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} bin_dir={str(self.bin_dir)!r}>"


def write_launcher_file(target: Path, content: str, mode: int = 0o755) -> None:
    """Create ``target`` exclusively with ``content`` and the given mode.

    A failed write removes the half-made file, so the name stays free.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        os.chmod(target, mode)
    except Exception:
        target.unlink(missing_ok=True)
        raise
