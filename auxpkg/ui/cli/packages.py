"""
CLI commands for finding and managing individual packages.

search, list, clone and remove; thin wrappers over the use cases.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

_json_option = click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")


def _print_entries(entries, name_only: bool) -> None:
    if name_only:
        for entry in entries:
            click.echo(entry.name)
        return

    for index, entry in enumerate(entries):
        if index:
            click.echo()
        sources = []
        if entry.system:
            sources.append(f"system {entry.system.version}")
        if entry.auxiliary:
            sources.append(f"aux {entry.auxiliary.version}")
        click.secho(entry.name, fg="cyan", bold=True, nl=False)
        click.echo(f"  ({', '.join(sources)})")

        record = entry.auxiliary or entry.system
        if record.description:
            click.echo(f"   Description: {record.description}")
        if record.maintainer:
            click.echo(f"   Maintainer: {record.maintainer}")


def _search(ctx, queries, source, installed, name_only, as_json) -> None:
    from auxpkg.core.use_cases.catalog import search_catalog

    result = search_catalog(
        list(queries),
        source=source,
        installed_only=installed,
        config_path=ctx.obj.get("config_path"),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if not result.entries:
        click.echo("No results.")
        return
    _print_entries(result.entries, name_only)


_source_option = click.option(
    "--source",
    type=click.Choice(["system", "aux"]),
    default=None,
    help="Only show packages known to this source.",
)
_installed_option = click.option("--installed", is_flag=True, help="Only show installed packages.")
_name_only_option = click.option("--name-only", is_flag=True, help="Print package names only.")


@click.command()
@click.argument("queries", nargs=-1, required=True)
@_source_option
@_installed_option
@_name_only_option
@_json_option
@click.pass_context
def search(ctx, queries, source, installed, name_only, as_json) -> None:
    """Search package names and descriptions.

    Examples:
        auxpkg search hello
        auxpkg search --source aux editor
    """
    _search(ctx, queries, source, installed, name_only, as_json)


@click.command("list")
@click.argument("queries", nargs=-1)
@_source_option
@_installed_option
@_name_only_option
@_json_option
@click.pass_context
def list_packages(ctx, queries, source, installed, name_only, as_json) -> None:
    """List packages, optionally filtered by QUERIES."""
    _search(ctx, queries, source, installed, name_only, as_json)


@click.command()
@click.argument("base")
@click.option(
    "--dest",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to clone into (default: ./BASE).",
)
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@_json_option
@click.pass_context
def clone(ctx, base: str, dest: str | None, mock: bool, as_json: bool) -> None:
    """Clone the package base BASE from the auxiliary repository."""
    from auxpkg.core.use_cases.clone import run_clone

    result = run_clone(
        base,
        dest=Path(dest) if dest else None,
        config_path=ctx.obj.get("config_path"),
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        if result.hint:
            click.secho(
                f"   Package base '{result.hint}' builds '{base}'; clone that instead:",
                fg="yellow",
            )
            click.echo(f"     auxpkg clone {result.hint}")
        sys.exit(1)

    click.secho(f"✅ Cloned {base} into {result.path}", fg="green")


@click.command()
@click.argument("names", nargs=-1)
@click.option("--purge", is_flag=True, help="Also remove configuration files.")
@click.option("--autoremove", is_flag=True, help="Also remove packages that are no longer needed.")
@click.option("--mock", is_flag=True, help="Use mock adapter (no real execution).")
@_json_option
@click.pass_context
def remove(ctx, names, purge: bool, autoremove: bool, mock: bool, as_json: bool) -> None:
    """Remove installed packages."""
    from auxpkg.core.use_cases.remove import run_remove

    if not names and not autoremove:
        raise click.UsageError("Give package names, --autoremove, or both.")

    result = run_remove(
        list(names),
        purge=purge,
        autoremove=autoremove,
        config_path=ctx.obj.get("config_path"),
        mock_mode=mock,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    for name in result.not_installed:
        click.secho(f"⚠️  {name} isn't installed, so not removing.", fg="yellow")

    if not result.ok:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    removed = ", ".join(result.removed) or "unneeded packages"
    click.secho(f"✅ Removed {removed}", fg="green")
