"""
Logging setup for the lnb CLI.

Every module logs through ``logging.getLogger(__name__)``, so all of
lnb's records land under the ``lnb`` logger. ``setup_logging`` attaches
handlers there (not on the root logger) and is safe to call once per
CLI invocation: previous handlers are closed and replaced.

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  LNB_LOG_LEVEL  >  WARNING

LNB_LOG_FILE adds a file handler; LNB_LOG_FILE_LEVEL sets its level
independently (default: same as the console).
"""

from __future__ import annotations

import logging
import os
import sys

LOGGER_NAME = "lnb"

_CONSOLE_FORMATS = {
    logging.DEBUG: "%(levelname)-5s %(name)s:%(lineno)d  %(message)s",
    logging.INFO: "[%(name)s] %(message)s",
}
_CONSOLE_DEFAULT = "lnb: %(message)s"

_FILE_FMT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, then LNB_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get("LNB_LOG_LEVEL", "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Configure the ``lnb`` logger tree and return its root.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path of a log file to append to.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(_console_format(console_level)))
    logger.addHandler(console)

    effective = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        effective = min(effective, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FILE_FMT, datefmt=_FILE_DATEFMT))
        logger.addHandler(fh)

    logger.setLevel(effective)
    logger.propagate = False
    return logger


def _console_format(level: int) -> str:
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            return _CONSOLE_FORMATS[threshold]
    return _CONSOLE_DEFAULT


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
