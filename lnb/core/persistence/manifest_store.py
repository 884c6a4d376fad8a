"""
Manifest store — durable record of every name lnb has registered.

The manifest is stored as JSON (``~/.lnb/config.json`` by default).
It is loaded lazily on first access and rewritten in full after every
mutation: read-modify-write, last writer wins, no merging. Writes go
through a temp file in the same directory followed by a rename.

The store also owns staleness reconciliation: an entry whose launcher
artifact has vanished from disk is dropped before an install, so the
name can be registered again without a manual remove.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from lnb.core.errors import FilesystemError
from lnb.core.models.entry import Entry, Manifest

logger = logging.getLogger(__name__)


class ManifestStore:
    """Load/save/query access to a single manifest file.

    One store instance is created per process and passed explicitly
    to the installers and the registration engine.
    """

    def __init__(self, path: Path):
        self._path = path
        self._manifest: Manifest | None = None

    @property
    def path(self) -> Path:
        return self._path

    # ── Persistence ─────────────────────────────────────────────

    def load(self) -> Manifest:
        """Return the current manifest, reading it from disk on first use.

        A missing file yields an empty manifest. A corrupt file is
        reported and also treated as empty.

        Raises:
            FilesystemError: The file exists but cannot be read.
        """
        if self._manifest is None:
            self._manifest = self._read()
        return self._manifest

    def reload(self) -> Manifest:
        """Drop the cached manifest and read it again from disk."""
        self._manifest = None
        return self.load()

    def save(self, manifest: Manifest | None = None) -> None:
        """Persist the full manifest, overwriting prior content.

        Raises:
            OSError: If the file cannot be written.
        """
        if manifest is not None:
            self._manifest = manifest
        manifest = self.load()

        path = self._path
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(manifest.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".manifest_", suffix=".tmp")
        tmp = Path(tmp_path)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(content)
            os.replace(tmp, path)
            logger.debug("Manifest saved to %s (%d entries)", path, len(manifest.entries))
        except Exception:
            tmp.unlink(missing_ok=True)
            logger.error("Failed to save manifest to %s", path)
            raise

    def _read(self) -> Manifest:
        path = self._path
        if not path.is_file():
            logger.info("No manifest at %s — starting empty", path)
            return Manifest()

        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Manifest %s is not valid UTF-8 (%s) — starting empty", path, e)
            return Manifest()
        except OSError as e:
            raise FilesystemError(f"Cannot read manifest {path}: {e}") from e

        try:
            manifest = Manifest.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning("Manifest %s is unreadable (%s) — starting empty", path, e)
            return Manifest()

        logger.debug("Loaded manifest from %s (%d entries)", path, len(manifest.entries))
        return manifest

    # ── Queries and mutations ───────────────────────────────────

    def get(self, name: str) -> Entry | None:
        return self.load().get(name)

    def put(self, entry: Entry) -> None:
        """Insert or overwrite by name. Callers check uniqueness first."""
        self.load().put(entry)

    def delete(self, name: str) -> None:
        self.load().delete(name)

    def list(self) -> list[Entry]:
        return list(self.load().entries.values())

    def find_by_target(self, target: str) -> Entry | None:
        return self.load().find_by_target(target)

    # ── Staleness ───────────────────────────────────────────────

    def reconcile(self, name: str) -> str | None:
        """Drop ``name`` if its launcher artifact no longer exists.

        Returns:
            A diagnostic message when a stale entry was removed,
            otherwise None.
        """
        entry = self.get(name)
        if entry is None or os.path.lexists(entry.target_path):
            return None

        message = (
            f"Manifest shows '{name}' as installed but target file "
            f"'{entry.target_path}' doesn't exist. Cleaning up manifest entry."
        )
        logger.warning(message)
        self.delete(name)
        try:
            self.save()
        except (OSError, UnicodeError) as e:
            logger.warning("Failed to persist manifest cleanup: %s", e)
            message += f" (manifest cleanup not persisted: {e})"
        return message
