"""
Entry and Manifest models — the persisted registration records.

The wire format matches ``~/.lnb/config.json``::

    {
      "entries": {
        "deploy": {
          "name": "deploy",
          "source_path": "alias:docker compose up -d",
          "target_path": "/usr/local/bin/deploy",
          "installed_at": "2026-10-19T09:12:44.518201+00:00"
        }
      },
      "version": "1.0"
    }

An entry's kind is not stored: aliases are recognised by the
``alias:`` sentinel on ``source_path``.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, field_validator

ALIAS_PREFIX = "alias:"
MANIFEST_VERSION = "1.0"


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class EntryKind(str, Enum):
    """What a registered name points at."""

    BINARY = "binary"
    ALIAS = "alias"


class Entry(BaseModel):
    """One registered binary or alias and its launcher artifact."""

    name: str
    source_path: str            # absolute binary path, or "alias:<original command>"
    target_path: str            # launcher artifact on disk
    installed_at: str = Field(default_factory=_now_iso)

    @classmethod
    def for_binary(cls, name: str, source: str, target: str) -> Entry:
        return cls(name=name, source_path=source, target_path=target)

    @classmethod
    def for_alias(cls, name: str, command: str, target: str) -> Entry:
        return cls(name=name, source_path=ALIAS_PREFIX + command, target_path=target)

    @property
    def kind(self) -> EntryKind:
        if self.source_path.startswith(ALIAS_PREFIX):
            return EntryKind.ALIAS
        return EntryKind.BINARY

    @property
    def source(self) -> str:
        """The source path, or the alias command with the sentinel stripped."""
        if self.kind is EntryKind.ALIAS:
            return self.source_path[len(ALIAS_PREFIX):]
        return self.source_path

    def installed_display(self) -> str:
        """Install time as ``YYYY-MM-DD HH:MM:SS``, or the raw value if unparseable."""
        try:
            return datetime.fromisoformat(self.installed_at).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            return self.installed_at

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "source": self.source,
            "target": self.target_path,
            "installed_at": self.installed_at,
        }


class Manifest(BaseModel):
    """The full set of entries, keyed by name."""

    entries: dict[str, Entry] = Field(default_factory=dict)
    version: str = MANIFEST_VERSION

    @field_validator("entries", mode="before")
    @classmethod
    def _null_entries(cls, value: object) -> object:
        # older manifests serialised an empty map as null
        return {} if value is None else value

    def get(self, name: str) -> Entry | None:
        return self.entries.get(name)

    def put(self, entry: Entry) -> None:
        self.entries[entry.name] = entry

    def delete(self, name: str) -> None:
        self.entries.pop(name, None)

    def find_by_target(self, target: str) -> Entry | None:
        """Return the entry whose launcher lives at ``target``, if any."""
        for entry in self.entries.values():
            if entry.target_path == target:
                return entry
        return None
