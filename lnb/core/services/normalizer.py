"""
Command normalizer — validate and canonicalize what gets registered.

Two entry points:

    normalize_binary(path)   → absolute Path of an existing executable
    normalize(command)       → alias command with paths made absolute

Alias rules, applied to the first token:
    - blank input                     → EmptyCommandError
    - path-like (has a separator, or
      starts with ./ ../ or ~/)       → must exist, rewritten absolute
    - bare command name               → only a metacharacter blacklist;
                                        it may live on a PATH we can't see

Later tokens that look like relative paths are made absolute when they
exist on disk and left alone otherwise.

Platform differences (path separators, execute-bit checks, bundle
launching) are constructor options chosen by the installer, so this
module never looks at the current OS.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from lnb.core.errors import (
    CommandNotFoundError,
    DangerousCharactersError,
    EmptyCommandError,
    NotExecutableError,
    NotFoundError,
)
from lnb.core.services.tokenizer import Token, join_command, tokenize

logger = logging.getLogger(__name__)

DANGEROUS_CHARS = frozenset("{}[]()<>|&;")
EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH

# Absolute interpreter paths that take their script as a separate word.
_INTERPRETER_SUFFIXES = ("/bin/java", "/bin/node")


def is_executable(path: str | Path) -> bool:
    """True if any of the owner/group/other execute bits is set."""
    return bool(os.stat(path).st_mode & EXEC_BITS)


class CommandNormalizer:
    """Validates binary paths and rewrites alias commands.

    Args:
        separators: Characters that make a token path-like.
        require_executable: Reject regular files without an execute bit.
        bundle_suffix: Directory suffix launched via ``bundle_launcher``
            (``.app`` on macOS).
        bundle_launcher: Command prefix used to open bundles,
            e.g. ``["open", "-a"]``.
    """

    def __init__(
        self,
        separators: tuple[str, ...] = ("/",),
        require_executable: bool = True,
        bundle_suffix: str | None = None,
        bundle_launcher: list[str] | None = None,
    ):
        self.separators = separators
        self.require_executable = require_executable
        self.bundle_suffix = bundle_suffix
        self.bundle_launcher = bundle_launcher or []

    # ── Binaries ────────────────────────────────────────────────

    def normalize_binary(self, raw_path: str) -> Path:
        """Return the absolute path of an existing, executable file.

        Raises:
            NotFoundError: The path does not exist.
            NotExecutableError: No execute bit is set (when required).
        """
        path = os.path.expanduser(raw_path)
        if not os.path.exists(path):
            raise NotFoundError(f"File '{raw_path}' does not exist.")

        absolute = Path(os.path.abspath(path))
        if self.require_executable and not is_executable(absolute):
            raise NotExecutableError(
                f"File '{absolute}' is not executable: file does not have execute permissions"
            )
        return absolute

    # ── Alias commands ──────────────────────────────────────────

    def normalize(self, command: str) -> str:
        """Validate an alias command and return its canonical form.

        Raises:
            EmptyCommandError: Blank input.
            CommandNotFoundError: A path-like first token doesn't exist.
            NotExecutableError: It exists but can't be executed.
            DangerousCharactersError: A bare command name contains
                shell metacharacters.
        """
        if not command or not command.strip():
            raise EmptyCommandError("Command cannot be empty.")

        tokens = tokenize(command.strip())
        tokens[0] = self._normalize_head(tokens[0])
        for i in range(1, len(tokens)):
            tokens[i] = self._canonicalize_argument(tokens[i])

        if self._is_bundle(tokens[0].value):
            launcher = [Token(value=word) for word in self.bundle_launcher]
            tokens = launcher + tokens
            logger.debug("Launching bundle via %s", " ".join(self.bundle_launcher))

        return join_command([t.render() for t in tokens])

    def _normalize_head(self, head: Token) -> Token:
        executable, trailing = head.value, ""
        if (
            head.quoted
            and _has_whitespace(executable)
            and not self._names_existing_path(_expand_home(executable))
        ):
            executable, trailing = split_quoted_head(executable)
        executable = _expand_home(executable)

        if not self.is_path_like(executable):
            logger.info(
                "Command '%s' will be executed as-is (assumed to be on PATH)", executable
            )
            bad = sorted(set(executable) & DANGEROUS_CHARS)
            if bad:
                raise DangerousCharactersError(
                    f"Command '{executable}' contains potentially dangerous "
                    f"characters: {' '.join(bad)}"
                )
            return head

        absolute = os.path.abspath(executable)
        if not os.path.exists(absolute):
            raise CommandNotFoundError(f"Command '{executable}' not found: {absolute}")

        if (
            self.require_executable
            and os.path.isfile(absolute)
            and not self._is_bundle(absolute)
            and not is_executable(absolute)
        ):
            raise NotExecutableError(
                f"File '{absolute}' is not executable: file does not have execute permissions"
            )

        logger.info("Validated file path: %s", absolute)
        value = f"{absolute} {trailing}" if trailing else absolute
        return head.with_value(value)

    def _canonicalize_argument(self, token: Token) -> Token:
        value = token.value
        if not self._looks_relative(value):
            return token
        absolute = os.path.abspath(value)
        if not os.path.exists(absolute):
            return token
        return token.with_value(absolute)

    # ── Classification ──────────────────────────────────────────

    def is_path_like(self, value: str) -> bool:
        return any(sep in value for sep in self.separators) or value.startswith(("./", "../"))

    def _looks_relative(self, value: str) -> bool:
        for sep in self.separators:
            if value.startswith(("." + sep, ".." + sep)):
                return True
        return "." in value and not os.path.isabs(value) and "://" not in value

    def _names_existing_path(self, value: str) -> bool:
        """A whole quoted value that exists on disk is never split."""
        return self.is_path_like(value) and os.path.exists(os.path.abspath(value))

    def _is_bundle(self, value: str) -> bool:
        return bool(self.bundle_suffix) and value.rstrip("/").endswith(self.bundle_suffix)


def split_quoted_head(inner: str) -> tuple[str, str]:
    """Decide where the executable ends inside a quoted first token.

    Only consulted when the whole quoted value does not exist on disk;
    an existing path with spaces is always kept in one piece.

    ``"/Applications/Visual Studio Code.app"`` is one path with spaces;
    ``"/usr/bin/java -jar app.jar"`` is an executable plus arguments.
    The rule, for a quoted value containing whitespace:

        - absolute, first word ends in ``.app`` or has no ``.`` and is
          not a java/node interpreter   → the whole value is the path
        - absolute otherwise            → first word, rest are arguments
        - relative (``./``, ``../``) or
          a bare name                   → first word, rest are arguments

    Returns:
        (executable, trailing arguments); trailing is ``""`` when the
        whole value is treated as a path.
    """
    parts = inner.split(None, 1)
    if len(parts) == 1:
        return inner, ""

    first, rest = parts
    if inner.startswith("/"):
        if first.endswith(".app") or (
            "." not in first and not first.endswith(_INTERPRETER_SUFFIXES)
        ):
            return inner, ""
    return first, rest


def _expand_home(value: str) -> str:
    if value.startswith("~/"):
        return os.path.expanduser(value)
    return value


def _has_whitespace(value: str) -> bool:
    return " " in value or "\t" in value
