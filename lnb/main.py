"""
lnb — CLI entrypoint.

Usage:
    lnb install ./build/mytool
    lnb ./build/mytool                 (same as install)
    lnb remove mytool
    lnb alias logs tail -f /var/log/app.log
    lnb unalias logs
    lnb list
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from lnb import __version__
from lnb.core.config.loader import ConfigError, load_settings
from lnb.core.errors import LnbError
from lnb.core.installers.base import InstallReport, RemoveReport
from lnb.core.models.entry import EntryKind
from lnb.core.observability.logging_config import resolve_level, setup_logging
from lnb.core.use_cases.register import RegistrationEngine


class SmartGroup(click.Group):
    """Treats ``lnb <path>`` as ``lnb install <path>``.

    Any first argument that is not a command name is taken as a path,
    so a typo reports "does not exist" rather than "no such command".
    """

    def resolve_command(self, ctx: click.Context, args: list[str]):
        first = args[0] if args else ""
        if first and first not in self.commands and not first.startswith("-"):
            return "install", self.commands["install"], args
        return super().resolve_command(ctx, args)


@click.group(cls=SmartGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="lnb")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to settings.yml (default: ~/.lnb/settings.yml).",
)
@click.option(
    "--add-to-path",
    is_flag=True,
    help="Windows: add the launcher directory to the user PATH if missing.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
    add_to_path: bool,
) -> None:
    """LNB — Link Binary: make executables and commands available everywhere."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None
    ctx.obj["add_to_path"] = add_to_path

    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get("LNB_LOG_FILE"),
        log_file_level=os.environ.get("LNB_LOG_FILE_LEVEL"),
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _engine(ctx: click.Context) -> RegistrationEngine:
    """Build the registration engine once per invocation."""
    engine = ctx.obj.get("engine")
    if engine is None:
        try:
            settings = load_settings(ctx.obj.get("config_path"))
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red")
            sys.exit(1)
        if ctx.obj.get("add_to_path"):
            settings.manage_path = True
        engine = RegistrationEngine.from_settings(settings)
        ctx.obj["engine"] = engine
    return engine


def _fail(error: LnbError) -> None:
    click.secho(f"❌ Error: {error}", fg="red")
    sys.exit(1)


def _echo_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        click.secho(f"⚠️  Warning: {warning}", fg="yellow")


def _emit(ctx: click.Context, report: InstallReport | RemoveReport, as_json: bool, message: str) -> None:
    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return
    _echo_warnings(report.warnings)
    click.secho(f"✅ {message}", fg="green")
    if ctx.obj.get("verbose"):
        click.echo(f"   Target: {report.target}")


# ── Binaries ────────────────────────────────────────────────────


@cli.command()
@click.argument("file", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(ctx: click.Context, file: str | None, as_json: bool) -> None:
    """Install FILE as a command reachable from any directory."""
    if not file:
        file = click.prompt("Enter path to binary", default="", show_default=False).strip()
        if not file:
            click.secho("❌ Error: File path cannot be empty.", fg="red")
            sys.exit(1)

    try:
        report = _engine(ctx).install_binary(file)
    except LnbError as e:
        _fail(e)
        return

    _emit(ctx, report, as_json, f"Successfully installed '{report.name}'")


@cli.command()
@click.argument("file")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def remove(ctx: click.Context, file: str, as_json: bool) -> None:
    """Remove a binary installed by lnb (by name or original path)."""
    try:
        report = _engine(ctx).remove_binary(file)
    except LnbError as e:
        _fail(e)
        return

    _emit(ctx, report, as_json, f"Successfully removed '{report.name}'")


# ── Aliases ─────────────────────────────────────────────────────


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("name", required=False)
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def alias(ctx: click.Context, name: str | None, command: tuple[str, ...], as_json: bool) -> None:
    """Create NAME as a shortcut for COMMAND.

    Examples:

        lnb alias logs tail -f /var/log/app.log

        lnb alias deploy "docker compose up -d"

        lnb alias code "/Applications/Visual Studio Code.app"
    """
    if not name:
        name = click.prompt("Enter alias name", default="", show_default=False).strip()
        if not name:
            click.secho("❌ Error: Alias name cannot be empty.", fg="red")
            sys.exit(1)

    text = " ".join(command)
    if not text.strip():
        text = click.prompt("Enter command", default="", show_default=False).strip()
        if not text:
            click.secho("❌ Error: Command cannot be empty.", fg="red")
            sys.exit(1)

    try:
        report = _engine(ctx).install_alias(name, text)
    except LnbError as e:
        _fail(e)
        return

    _emit(ctx, report, as_json, f"Successfully created alias '{name}' for command '{report.command}'")


@cli.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def unalias(ctx: click.Context, name: str, as_json: bool) -> None:
    """Remove an alias created by lnb."""
    try:
        report = _engine(ctx).remove_alias(name)
    except LnbError as e:
        _fail(e)
        return

    _emit(ctx, report, as_json, f"Successfully removed alias '{name}'")


# ── Listing ─────────────────────────────────────────────────────


@cli.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_entries(ctx: click.Context, as_json: bool) -> None:
    """List binaries and aliases installed by lnb."""
    try:
        entries = _engine(ctx).list_entries()
    except LnbError as e:
        _fail(e)
        return

    if as_json:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2))
        return

    if not entries:
        click.echo("No binaries or aliases installed by LNB.")
        return

    click.secho(f"Binaries and aliases installed by LNB ({len(entries)}):", fg="cyan", bold=True)
    click.echo()
    for entry in entries:
        click.secho(f"  {entry.name}", bold=True)
        if entry.kind is EntryKind.ALIAS:
            click.echo("    Type:      alias")
            click.echo(f"    Command:   {entry.source}")
        else:
            click.echo("    Type:      binary")
            click.echo(f"    Source:    {entry.source}")
        click.echo(f"    Target:    {entry.target_path}")
        click.echo(f"    Installed: {entry.installed_display()}")
        click.echo()


if __name__ == "__main__":
    cli()
