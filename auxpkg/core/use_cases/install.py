"""
Install use case — install packages from either source.

The full vertical slice from user intent to installed packages: load
settings, load the catalog, sort the requested names between the
system index and the auxiliary repository, resolve and order, then
clone, build and install.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from auxpkg.adapters.registry import AdapterRegistry
from auxpkg.core.config.loader import ConfigError, load_settings
from auxpkg.core.models import Settings
from auxpkg.core.services.aux_install.catalog import Catalog, CatalogError
from auxpkg.core.services.aux_install.domain import ResolutionError
from auxpkg.core.services.aux_install.orchestration import (
    BuildPlan,
    ExecutionReport,
    build_catalog,
    build_registry,
    classify_requests,
    execute_build_plan,
    plan_install,
)
from auxpkg.core.services.aux_install.orchestration.orchestrator import Chooser

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install run."""

    requested: list[str] | None = None
    build_plan: BuildPlan | None = None
    report: ExecutionReport | None = None
    dry_run: bool = False
    mock: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.report is None or self.report.ok)

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result

        result["requested"] = self.requested or []
        result["dry_run"] = self.dry_run
        result["mock"] = self.mock
        if self.build_plan:
            result["plan"] = self.build_plan.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_install(
    names: list[str],
    *,
    config_path: Path | None = None,
    prefer: str | None = None,
    choose: Chooser | None = None,
    dry_run: bool = False,
    mock_mode: bool = False,
    refresh: bool = False,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    registry: AdapterRegistry | None = None,
) -> InstallResult:
    """Install ``names``.

    Args:
        names: Requested package names.
        config_path: Optional explicit config file.
        prefer: ``"system"`` or ``"aux"`` for names found in both sources.
        choose: Asked per name in both sources when ``prefer`` is None.
        dry_run: Plan only; nothing is cloned, built or installed.
        mock_mode: Execute through the mock adapter.
        refresh: Download the auxiliary archive even if the cache is fresh.
        settings: Pre-loaded settings (skips config loading).
        catalog: Pre-built catalog (skips archive and index loading).
        registry: Pre-configured adapter registry.

    Returns:
        InstallResult; ``error`` is set on any configuration, catalog or
        resolution failure, and nothing is executed in that case.
    """
    result = InstallResult(requested=list(names), dry_run=dry_run, mock=mock_mode)

    if not names:
        result.error = "No packages were specified."
        return result

    # ── Settings and catalog ─────────────────────────────────────
    try:
        if settings is None:
            settings = load_settings(config_path)
        if catalog is None:
            catalog = build_catalog(settings, refresh=refresh)
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    # ── Plan ─────────────────────────────────────────────────────
    try:
        aux_roots, system_roots = classify_requests(
            names, catalog, prefer=prefer, choose=choose,
        )
        result.build_plan = plan_install(
            aux_roots, system_roots, catalog,
            recursion_limit=settings.recursion_limit,
        )
    except ResolutionError as e:
        result.error = str(e)
        return result

    if dry_run:
        return result

    # ── Execute ──────────────────────────────────────────────────
    if registry is None:
        registry = build_registry(mock_mode=mock_mode)

    result.report = execute_build_plan(result.build_plan, settings, registry)
    if not result.report.ok:
        logger.error("Install stopped: %s", result.report.failed.error)
    return result
