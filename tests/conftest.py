"""
Shared test fixtures and configuration.

Every fixture here keeps lnb inside ``tmp_path``: the manifest, the
launcher directory and the settings home never touch the real
``~/.lnb`` or ``/usr/local/bin``.
"""

import logging
from pathlib import Path

import pytest

from lnb.core.installers.posix import PosixInstaller
from lnb.core.persistence.manifest_store import ManifestStore
from lnb.core.use_cases.register import RegistrationEngine


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Point lnb's home at a temp dir and clear env overrides."""
    home = tmp_path / "lnb-home"
    monkeypatch.setenv("LNB_HOME", str(home))
    for var in (
        "LNB_CONFIG",
        "LNB_MANIFEST",
        "LNB_BIN_DIR",
        "LNB_PLATFORM",
        "LNB_LOG_LEVEL",
        "LNB_LOG_FILE",
        "LNB_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_lnb_logger():
    """Drop handlers a CLI run attached to the lnb logger."""
    yield
    logger = logging.getLogger("lnb")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Launcher directory."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def manifest_path(tmp_path: Path) -> Path:
    return tmp_path / "state" / "config.json"


@pytest.fixture
def store(manifest_path: Path) -> ManifestStore:
    return ManifestStore(manifest_path)


@pytest.fixture
def installer(bin_dir: Path, store: ManifestStore) -> PosixInstaller:
    return PosixInstaller(bin_dir, store)


@pytest.fixture
def engine(installer: PosixInstaller, store: ManifestStore) -> RegistrationEngine:
    return RegistrationEngine(installer, store)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch) -> Path:
    """A scratch directory that is also the current working directory."""
    path = tmp_path / "work"
    path.mkdir()
    path = path.resolve()
    monkeypatch.chdir(path)
    return path


@pytest.fixture
def make_executable():
    """Factory: write a small script and mark it executable."""

    def _make(path: Path, body: str = "echo hello", mode: int = 0o755) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(mode)
        return path

    return _make
