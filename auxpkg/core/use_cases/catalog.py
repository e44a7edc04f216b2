"""
Catalog use cases — refresh the auxiliary archive and inspect packages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from auxpkg.core.config.loader import ConfigError, load_settings
from auxpkg.core.models import Settings
from auxpkg.core.services.aux_install.catalog import (
    Catalog,
    CatalogEntry,
    CatalogError,
    load_aux_archive,
)
from auxpkg.core.services.aux_install.orchestration import build_catalog


@dataclass
class CatalogUpdateResult:
    """Result of refreshing the auxiliary archive."""

    package_count: int = 0
    cache_dir: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {"package_count": self.package_count, "cache_dir": self.cache_dir}


@dataclass
class CatalogInfoResult:
    """Both sources' view of one package name."""

    entry: CatalogEntry | None = None
    distro: str | None = None
    arch: str | None = None
    selected: dict[str, list[str]] = field(default_factory=dict)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        result = self.entry.to_dict() if self.entry else {}
        result["distro"] = self.distro
        result["arch"] = self.arch
        result["selected"] = self.selected
        return result


@dataclass
class CatalogSearchResult:
    """Entries matching a search or listing."""

    entries: list[CatalogEntry] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {"packages": [entry.to_dict() for entry in self.entries]}


def update_catalog(
    config_path: Path | None = None,
    settings: Settings | None = None,
) -> CatalogUpdateResult:
    """Download the auxiliary archive regardless of cache age."""
    result = CatalogUpdateResult()
    try:
        if settings is None:
            settings = load_settings(config_path)
        records = load_aux_archive(
            settings.mpr_url,
            settings.cache_dir,
            settings.archive_max_age,
            refresh=True,
        )
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    result.package_count = len(records)
    result.cache_dir = settings.cache_dir
    return result


def catalog_info(
    name: str,
    config_path: Path | None = None,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
) -> CatalogInfoResult:
    """Look ``name`` up in both sources.

    ``selected`` holds the auxiliary record's relations as they apply
    to the active ``(distro, arch)``.
    """
    result = CatalogInfoResult()
    try:
        if catalog is None:
            if settings is None:
                settings = load_settings(config_path)
            catalog = build_catalog(settings)
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    entry = catalog.lookup(name)
    if not entry.found:
        result.error = f"Unable to find package '{name}'."
        return result

    result.entry = entry
    result.distro, result.arch = catalog.distro_arch
    if entry.auxiliary:
        for relation in ("depends", "makedepends", "checkdepends", "conflicts", "provides"):
            result.selected[relation] = catalog.selected(entry.auxiliary, relation)
    return result


def search_catalog(
    queries: list[str],
    *,
    source: str | None = None,
    installed_only: bool = False,
    config_path: Path | None = None,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
) -> CatalogSearchResult:
    """Search both sources by name and description; list everything without queries."""
    result = CatalogSearchResult()
    try:
        if catalog is None:
            if settings is None:
                settings = load_settings(config_path)
            catalog = build_catalog(settings)
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    result.entries = catalog.search(queries, source=source, installed_only=installed_only)
    return result
