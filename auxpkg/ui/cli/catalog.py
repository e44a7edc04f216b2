"""
CLI commands for the package catalog.

Thin wrappers over ``auxpkg.core.use_cases.catalog``.
"""

from __future__ import annotations

import json
import sys

import click


@click.group()
def catalog() -> None:
    """Catalog — refresh the package archive, inspect packages."""


@catalog.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def update(ctx: click.Context, as_json: bool) -> None:
    """Download the auxiliary package archive."""
    from auxpkg.core.use_cases.catalog import update_catalog

    result = update_catalog(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    click.secho(f"✅ {result.package_count} packages cached in {result.cache_dir}", fg="green")


@catalog.command()
@click.argument("name")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def info(ctx: click.Context, name: str, as_json: bool) -> None:
    """Show what each source knows about NAME."""
    from auxpkg.core.use_cases.catalog import catalog_info

    result = catalog_info(name, config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    entry = result.entry
    assert entry is not None

    click.secho(f"\n📦 {entry.name}", fg="cyan", bold=True)

    if entry.system:
        click.secho("   System:", fg="white", bold=True)
        click.echo(f"     Version: {entry.system.version}")
        if entry.system.description:
            click.echo(f"     {entry.system.description}")

    if entry.auxiliary:
        rec = entry.auxiliary
        click.secho("   Auxiliary:", fg="white", bold=True)
        click.echo(f"     Version: {rec.version}")
        click.echo(f"     Base: {rec.base}")
        if rec.description:
            click.echo(f"     {rec.description}")
        if rec.maintainer:
            click.echo(f"     Maintainer: {rec.maintainer}")
        click.echo(f"     For: {result.distro or '*'}/{result.arch or '*'}")
        for relation, expressions in result.selected.items():
            if expressions:
                click.echo(f"     {relation}: {', '.join(expressions)}")

    click.echo()
