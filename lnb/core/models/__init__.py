"""
Domain models — Pydantic types for the registration engine.

    from lnb.core.models import Entry, EntryKind, Manifest
"""

from lnb.core.models.entry import ALIAS_PREFIX, Entry, EntryKind, Manifest

__all__ = [
    "ALIAS_PREFIX",
    "Entry",
    "EntryKind",
    "Manifest",
]
