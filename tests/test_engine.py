"""
Tests for the registration engine — end-to-end install/remove flows
against a temp launcher directory.
"""

import os

import pytest

from lnb.core.config.loader import Settings
from lnb.core.errors import (
    AlreadyInstalledError,
    CommandNotFoundError,
    EmptyCommandError,
    FilesystemError,
    InvalidNameError,
    NotExecutableError,
    NotFoundError,
    NotInstalledError,
    TargetExistsError,
)
from lnb.core.installers.posix import PosixInstaller
from lnb.core.models import EntryKind
from lnb.core.persistence.manifest_store import ManifestStore
from lnb.core.use_cases.register import RegistrationEngine, validate_name


class TestInstallBinary:
    """Tests for install_binary / remove_binary."""

    def test_install_relative_path(self, engine, bin_dir, workdir, make_executable):
        """A relative path is registered by its absolute form."""
        tool = make_executable(workdir / "build" / "mytool")
        report = engine.install_binary("./build/mytool")

        assert report.source == str(tool)
        assert os.readlink(bin_dir / "mytool") == str(tool)

    def test_missing_binary(self, engine, bin_dir, workdir):
        """A missing binary leaves the launcher dir empty."""
        with pytest.raises(NotFoundError, match="does not exist"):
            engine.install_binary("./nope")
        assert list(bin_dir.iterdir()) == []

    def test_not_executable(self, engine, bin_dir, workdir, make_executable):
        """A file without execute bits is refused."""
        make_executable(workdir / "plain", mode=0o644)
        with pytest.raises(NotExecutableError):
            engine.install_binary("plain")
        assert engine.list_entries() == []

    def test_already_installed(self, engine, workdir, make_executable):
        """Installing the same name twice fails."""
        make_executable(workdir / "mytool")
        engine.install_binary("mytool")
        with pytest.raises(AlreadyInstalledError):
            engine.install_binary("mytool")
        assert len(engine.list_entries()) == 1

    def test_stale_entry_is_replaced(self, engine, bin_dir, workdir, make_executable):
        """A hand-deleted launcher is cleaned up and reinstalled."""
        make_executable(workdir / "mytool")
        engine.install_binary("mytool")
        (bin_dir / "mytool").unlink()

        report = engine.install_binary("mytool")
        assert any("Cleaning up manifest entry" in w for w in report.warnings)
        assert [e.name for e in engine.list_entries()] == ["mytool"]
        assert (bin_dir / "mytool").is_symlink()

    def test_dangling_symlink_is_not_stale(self, engine, bin_dir, workdir, make_executable):
        """A launcher whose source vanished still occupies the name."""
        tool = make_executable(workdir / "mytool")
        engine.install_binary("mytool")
        tool.unlink()
        other = make_executable(workdir / "other" / "mytool")

        with pytest.raises(AlreadyInstalledError):
            engine.install_binary(str(other))

    def test_foreign_file(self, engine, bin_dir, workdir, make_executable):
        """A file lnb didn't create blocks the install."""
        make_executable(workdir / "mytool")
        (bin_dir / "mytool").write_text("someone else's")
        with pytest.raises(TargetExistsError):
            engine.install_binary("mytool")

    def test_remove_by_name(self, engine, bin_dir, workdir, make_executable):
        """remove_binary by registered name."""
        make_executable(workdir / "mytool")
        engine.install_binary("mytool")
        report = engine.remove_binary("mytool")

        assert report.kind is EntryKind.BINARY
        assert not os.path.lexists(bin_dir / "mytool")
        assert engine.list_entries() == []

    def test_remove_by_original_path(self, engine, bin_dir, workdir, make_executable):
        """remove_binary by the path that was installed."""
        tool = make_executable(workdir / "build" / "mytool")
        engine.install_binary(str(tool))
        engine.remove_binary(str(tool))
        assert not os.path.lexists(bin_dir / "mytool")

    def test_remove_not_installed_leaves_disk(self, engine, bin_dir):
        """Unknown names fail without touching the filesystem."""
        (bin_dir / "ls-copy").write_text("")
        with pytest.raises(NotInstalledError):
            engine.remove_binary("ls-copy")
        assert (bin_dir / "ls-copy").exists()

    def test_remove_alias_with_remove(self, engine):
        """remove refuses an alias and points at unalias."""
        engine.install_alias("hi", "echo hi")
        with pytest.raises(NotInstalledError, match="lnb unalias hi"):
            engine.remove_binary("hi")
        assert engine.store.get("hi") is not None


class TestAliases:
    """Tests for install_alias / remove_alias."""

    def test_logs_alias(self, engine, bin_dir):
        """Alias records the original text and forwards arguments."""
        report = engine.install_alias("logs", "tail -f /var/log/x.log")

        assert report.command == "tail -f /var/log/x.log"
        content = (bin_dir / "logs").read_text()
        assert "tail -f /var/log/x.log" in content
        assert '"$@"' in content

        [entry] = engine.list_entries()
        assert entry.kind is EntryKind.ALIAS
        assert entry.source == "tail -f /var/log/x.log"
        assert entry.target_path == str(bin_dir / "logs")

    def test_relative_script_is_absolute_in_launcher(self, engine, bin_dir, workdir, make_executable):
        """The launcher runs the absolute path; the manifest keeps the input."""
        make_executable(workdir / "run.sh")
        report = engine.install_alias("run", "./run.sh --fast")

        assert report.command == f"{workdir}/run.sh --fast"
        assert engine.store.get("run").source == "./run.sh --fast"

    def test_quoted_path_with_spaces(self, engine, bin_dir, workdir, make_executable):
        """A quoted absolute path with spaces stays quoted."""
        tool = make_executable(workdir / "My Tools" / "go")
        engine.install_alias("go-tool", f'"{tool}"')
        assert f'"{tool}" "$@"' in (bin_dir / "go-tool").read_text()

    def test_quoted_relative_path_with_spaces(self, engine, bin_dir, workdir, make_executable):
        """A quoted relative path with spaces and ';' is one executable."""
        tool = make_executable(workdir / "my dir" / "run;x")
        report = engine.install_alias("r", '"./my dir/run;x" --go')

        assert report.command == f'"{tool}" --go'
        assert (bin_dir / "r").read_text() == f'#!/bin/bash\n"{tool}" --go "$@"\n'

    def test_unencodable_command(self, engine, bin_dir):
        """A command that can't be written as UTF-8 is a typed error."""
        with pytest.raises(FilesystemError):
            engine.install_alias("x", "echo \udcff")
        assert list(bin_dir.iterdir()) == []
        assert engine.list_entries() == []

    def test_missing_path_head(self, engine, bin_dir, workdir):
        """A missing script leaves no launcher and no entry."""
        with pytest.raises(CommandNotFoundError):
            engine.install_alias("x", "./missing.sh")
        assert list(bin_dir.iterdir()) == []
        assert engine.list_entries() == []

    def test_empty_command(self, engine):
        """A blank command is refused."""
        with pytest.raises(EmptyCommandError):
            engine.install_alias("x", "   ")

    @pytest.mark.parametrize("name", ["", "  ", "a/b", "a\\b", ".", ".."])
    def test_invalid_names(self, engine, bin_dir, name):
        """Names that aren't plain file names are refused."""
        with pytest.raises(InvalidNameError):
            engine.install_alias(name, "echo hi")
        assert list(bin_dir.iterdir()) == []

    def test_unalias(self, engine, bin_dir):
        """unalias deletes the script."""
        engine.install_alias("hi", "echo hi")
        report = engine.remove_alias("hi")
        assert report.kind is EntryKind.ALIAS
        assert not (bin_dir / "hi").exists()

    def test_unalias_binary(self, engine, workdir, make_executable):
        """unalias refuses a binary and points at remove."""
        make_executable(workdir / "mytool")
        engine.install_binary("mytool")
        with pytest.raises(NotInstalledError, match="lnb remove mytool"):
            engine.remove_alias("mytool")

    def test_unalias_unknown(self, engine):
        """unalias of an unknown name fails."""
        with pytest.raises(NotInstalledError, match="was not installed by LNB"):
            engine.remove_alias("ghost")


class TestListing:
    """Tests for list_entries."""

    def test_sorted_by_name(self, engine):
        """list_entries is sorted by name."""
        for name in ("zeta", "alpha", "mid"):
            engine.install_alias(name, "echo hi")
        assert [e.name for e in engine.list_entries()] == ["alpha", "mid", "zeta"]

    def test_persists_across_engines(self, engine, bin_dir):
        """A new engine sees what a previous one saved."""
        engine.install_alias("hi", "echo hi")
        store = ManifestStore(engine.store.path)
        fresh = RegistrationEngine(PosixInstaller(bin_dir, store), store)
        assert [e.name for e in fresh.list_entries()] == ["hi"]


class TestFromSettings:
    """Tests for building the engine from settings."""

    def test_uses_settings_paths(self, tmp_path):
        """Home and bin_dir come from settings."""
        settings = Settings(
            home=tmp_path / "home",
            bin_dir=tmp_path / "launchers",
            platform="linux",
        )
        engine = RegistrationEngine.from_settings(settings)
        assert engine.store.path == tmp_path / "home" / "config.json"
        assert engine.installer.bin_dir == tmp_path / "launchers"
        assert engine.installer.store is engine.store

    def test_manifest_override(self, tmp_path):
        """manifest_path overrides the home-relative default."""
        settings = Settings(manifest_path=tmp_path / "m.json", platform="linux")
        assert RegistrationEngine.from_settings(settings).store.path == tmp_path / "m.json"


class TestValidateName:
    def test_plain_names_pass(self):
        """Ordinary file names are accepted."""
        for name in ("tool", "my-tool", "tool.sh", "v2"):
            validate_name(name)
