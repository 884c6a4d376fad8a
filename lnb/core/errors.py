"""
Error taxonomy for the registration engine.

Every validation or filesystem failure raised by the core is an
``LnbError`` subclass. The CLI catches the base class, prints the
message and exits non-zero. Nothing here is retried.
"""

from __future__ import annotations


class LnbError(Exception):
    """Base class for all registration-engine failures."""


class NotFoundError(LnbError):
    """The binary path given for registration does not exist."""


class NotExecutableError(LnbError):
    """The file exists but carries no execute bit."""


class EmptyCommandError(LnbError):
    """The alias command is blank or whitespace-only."""


class CommandNotFoundError(LnbError):
    """A path-like alias target does not resolve to anything on disk."""


class DangerousCharactersError(LnbError):
    """A bare command name contains shell metacharacters."""


class InvalidNameError(LnbError):
    """The launcher name is empty or contains a path separator."""


class AlreadyInstalledError(LnbError):
    """A live manifest entry already claims the name."""


class TargetExistsError(LnbError):
    """Something not owned by lnb already sits at the launcher path."""


class NotInstalledError(LnbError):
    """No manifest entry (of the requested kind) exists for the name."""


class TargetMismatchError(LnbError):
    """The recorded launcher path differs from the one this platform computes."""


class FilesystemError(LnbError):
    """Wraps an OSError raised while creating or removing a launcher."""
