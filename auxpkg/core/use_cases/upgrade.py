"""
Upgrade use case — bring installed packages up to date.

Packages built from the auxiliary repository are upgraded by resolving
and rebuilding them like a fresh install; system packages are upgraded
in place through apt.
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
    execute_build_plan,
    plan_install,
    upgrade_candidates,
)

logger = logging.getLogger(__name__)


@dataclass
class UpgradeResult:
    """Result of an upgrade run."""

    build_plan: BuildPlan | None = None
    report: ExecutionReport | None = None
    dry_run: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.report is None or self.report.ok)

    @property
    def up_to_date(self) -> bool:
        return self.error is None and (self.build_plan is None or self.build_plan.empty)

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
            return result

        result["dry_run"] = self.dry_run
        result["up_to_date"] = self.up_to_date
        if self.build_plan:
            result["plan"] = self.build_plan.to_dict()
        if self.report:
            result["report"] = self.report.to_dict()
        return result


def run_upgrade(
    *,
    config_path: Path | None = None,
    aux_only: bool = False,
    system_only: bool = False,
    dry_run: bool = False,
    mock_mode: bool = False,
    refresh: bool = False,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    registry: AdapterRegistry | None = None,
) -> UpgradeResult:
    """Upgrade installed packages.

    Args:
        aux_only: Only upgrade packages built from the auxiliary repository.
        system_only: Only upgrade system packages.

    Returns:
        UpgradeResult; ``error`` is set on any failure before execution.
    """
    result = UpgradeResult(dry_run=dry_run)

    if aux_only and system_only:
        result.error = "--aux-only and --system-only are mutually exclusive."
        return result

    try:
        if settings is None:
            settings = load_settings(config_path)
        if catalog is None:
            catalog = build_catalog(settings, refresh=refresh)
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    aux_roots, system_upgrades = upgrade_candidates(
        catalog,
        include_aux=not system_only,
        include_system=not aux_only,
    )
    logger.info(
        "%d auxiliary and %d system package(s) can be upgraded",
        len(aux_roots), len(system_upgrades),
    )

    try:
        build_plan = plan_install(
            aux_roots, [], catalog,
            recursion_limit=settings.recursion_limit,
        )
    except ResolutionError as e:
        result.error = str(e)
        return result

    build_plan.system_upgrades = system_upgrades
    result.build_plan = build_plan

    if dry_run or build_plan.empty:
        return result

    if registry is None:
        registry = build_registry(mock_mode=mock_mode)

    result.report = execute_build_plan(build_plan, settings, registry)
    return result
