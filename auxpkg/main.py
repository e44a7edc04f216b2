"""
auxpkg — CLI entrypoint.

Usage:
    python -m auxpkg.main --help
    auxpkg install hello-world
    auxpkg install --dry-run foo bar
    auxpkg upgrade
    auxpkg search editor
    auxpkg clone hello-world
    auxpkg remove hello-world
    auxpkg config check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from auxpkg import __version__
from auxpkg.core.observability.logging_config import (
    ENV_LOG_FILE,
    ENV_LOG_FILE_LEVEL,
    resolve_level,
    setup_logging,
)
from auxpkg.ui.cli.catalog import catalog
from auxpkg.ui.cli.packages import clone, list_packages, remove, search


@click.group()
@click.version_option(version=__version__, prog_name="auxpkg")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to config.yml (default: $AUXPKG_CONFIG or ~/.config/auxpkg/config.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """auxpkg — install system and auxiliary-repository packages together."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
        quiet_third_party=not debug,
    )


# ── Rendering ───────────────────────────────────────────────────


def _print_plan(build_plan, title: str) -> None:
    click.secho(f"\n📋 {title}", fg="cyan", bold=True)

    marks = list(build_plan.plan.marks.values())
    if marks:
        click.secho(f"   System packages: {len(marks)}", fg="white", bold=True)
        for mark in marks:
            label = "requested" if not mark.auto_installed else f"for {mark.reason}"
            click.echo(f"     • {mark.name}={mark.version}  ({label})")

    if build_plan.system_upgrades:
        click.secho(f"   System upgrades: {len(build_plan.system_upgrades)}", fg="white", bold=True)
        for ref in build_plan.system_upgrades:
            click.echo(f"     • {ref.name} → {ref.version}")

    if build_plan.bases:
        click.secho("   Build order:", fg="white", bold=True)
        for index, batch in enumerate(build_plan.bases, start=1):
            click.echo(f"     {index}. {', '.join(batch)}")

    for pkg, conflicts in build_plan.resolution.conflicts.items():
        click.secho(f"   ⚠️  {pkg} conflicts with: {', '.join(conflicts)}", fg="yellow")

    click.echo()


def _print_report(report, verbose: bool) -> None:
    for receipt in report.receipts:
        timing = f" ({receipt.duration_ms}ms)" if receipt.duration_ms else ""
        if receipt.ok:
            click.secho(f"   ✓ {receipt.action_id}", fg="green", nl=False)
            click.echo(timing)
            if verbose and receipt.output:
                for line in receipt.output.strip().split("\n")[-10:]:
                    click.echo(f"     │ {line}")
        elif receipt.failed:
            click.secho(f"   ✗ {receipt.action_id}", fg="red", nl=False)
            click.echo(timing)
            if receipt.error:
                click.secho(f"     {receipt.error}", fg="red")
        else:
            click.secho(f"   ⊘ {receipt.action_id} (skipped)", fg="yellow")
    click.echo()


def _ask_source(name: str) -> str:
    click.secho(f"Package '{name}' is available from both sources.", fg="yellow")
    return click.prompt(
        "Install it from",
        type=click.Choice(["system", "aux"]),
        default="system",
    )


# ── Install / plan ──────────────────────────────────────────────


def _install(
    ctx: click.Context,
    names: tuple[str, ...],
    prefer: str | None,
    dry_run: bool,
    mock: bool,
    refresh: bool,
    as_json: bool,
) -> None:
    from auxpkg.core.use_cases.install import run_install

    result = run_install(
        list(names),
        config_path=ctx.obj.get("config_path"),
        prefer=prefer,
        choose=None if as_json else _ask_source,
        dry_run=dry_run,
        mock_mode=mock,
        refresh=refresh,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    build_plan = result.build_plan
    assert build_plan is not None

    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    _print_plan(build_plan, f"{mode_label}Install plan")

    if dry_run:
        return

    report = result.report
    assert report is not None
    _print_report(report, ctx.obj.get("verbose", False))

    if not report.ok:
        click.secho("❌ Install failed", fg="red", bold=True)
        sys.exit(1)
    click.secho("✅ Done", fg="green", bold=True)


_prefer_option = click.option(
    "--prefer",
    type=click.Choice(["system", "aux"]),
    default=None,
    help="Source to use for names found in both (default: ask).",
)
_json_option = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


@cli.command()
@click.argument("names", nargs=-1, required=True)
@_prefer_option
@click.option("--dry-run", is_flag=True, help="Plan but don't clone, build or install.")
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@click.option("--refresh", is_flag=True, help="Download the package archive even if cached.")
@_json_option
@click.pass_context
def install(
    ctx: click.Context,
    names: tuple[str, ...],
    prefer: str | None,
    dry_run: bool,
    mock: bool,
    refresh: bool,
    as_json: bool,
) -> None:
    """Install packages from the system index or the auxiliary repository.

    Examples:
        auxpkg install hello-world
        auxpkg install --prefer aux foo bar
        auxpkg install --dry-run foo
    """
    _install(ctx, names, prefer, dry_run, mock, refresh, as_json)


@cli.command()
@click.argument("names", nargs=-1, required=True)
@_prefer_option
@click.option("--refresh", is_flag=True, help="Download the package archive even if cached.")
@_json_option
@click.pass_context
def plan(
    ctx: click.Context,
    names: tuple[str, ...],
    prefer: str | None,
    refresh: bool,
    as_json: bool,
) -> None:
    """Show what installing NAMES would do (same as install --dry-run)."""
    _install(ctx, names, prefer, True, False, refresh, as_json)


# ── Upgrade ─────────────────────────────────────────────────────


@cli.command()
@click.option("--aux-only", is_flag=True, help="Only upgrade auxiliary-repository packages.")
@click.option("--system-only", is_flag=True, help="Only upgrade system packages.")
@click.option("--dry-run", is_flag=True, help="Plan but don't execute.")
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@click.option("--refresh", is_flag=True, help="Download the package archive even if cached.")
@_json_option
@click.pass_context
def upgrade(
    ctx: click.Context,
    aux_only: bool,
    system_only: bool,
    dry_run: bool,
    mock: bool,
    refresh: bool,
    as_json: bool,
) -> None:
    """Upgrade installed packages."""
    from auxpkg.core.use_cases.upgrade import run_upgrade

    result = run_upgrade(
        config_path=ctx.obj.get("config_path"),
        aux_only=aux_only,
        system_only=system_only,
        dry_run=dry_run,
        mock_mode=mock,
        refresh=refresh,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if result.up_to_date:
        click.secho("✅ Everything is up to date", fg="green")
        return

    assert result.build_plan is not None
    mode_label = "[dry-run] " if dry_run else "[mock] " if mock else ""
    _print_plan(result.build_plan, f"{mode_label}Upgrade plan")

    if result.report is None:
        return
    _print_report(result.report, ctx.obj.get("verbose", False))
    if not result.report.ok:
        click.secho("❌ Upgrade failed", fg="red", bold=True)
        sys.exit(1)
    click.secho("✅ Done", fg="green", bold=True)


# ── Config ──────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@_json_option
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate config.yml and show the effective settings."""
    from auxpkg.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)
        return

    if result.valid:
        assert result.settings is not None
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        click.echo(f"   File: {result.config_path or '(defaults)'}")
        for key, value in result.settings.model_dump().items():
            click.echo(f"   {key}: {value}")
    else:
        click.secho("❌ Configuration errors:", fg="red", bold=True)
        for err in result.errors:
            click.echo(f"   • {err}")

    if result.warnings:
        click.echo()
        click.secho("⚠️  Warnings:", fg="yellow")
        for warn in result.warnings:
            click.echo(f"   • {warn}")

    if not result.valid:
        click.echo()
        sys.exit(1)
    click.echo()


cli.add_command(catalog)
for _command in (search, list_packages, clone, remove):
    cli.add_command(_command)


if __name__ == "__main__":
    cli()
