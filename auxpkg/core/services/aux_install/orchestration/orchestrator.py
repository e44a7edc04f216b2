"""
L5 Orchestration — Top-level coordinators.

These functions tie everything together: load the catalog, sort the
requested names between the two sources, resolve and order auxiliary
packages, then clone, build and install them batch by batch.

Nothing is executed unless resolution and ordering both succeed, and
execution stops at the first failed receipt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from auxpkg.adapters import AdapterRegistry, AptAdapter, GitAdapter, MakedebAdapter, MockAdapter
from auxpkg.core.models import (
    Action,
    InstallationPlan,
    Receipt,
    ResolutionResult,
    Settings,
    VersionRef,
)
from auxpkg.core.services.aux_install.catalog import (
    Catalog,
    SystemIndex,
    load_aux_archive,
    load_system_index,
)
from auxpkg.core.services.aux_install.detection import current_distro_arch
from auxpkg.core.services.aux_install.domain import UnknownPackage
from auxpkg.core.services.aux_install.planner import order_packages, plan_build_order
from auxpkg.core.services.aux_install.resolver import resolve

logger = logging.getLogger(__name__)

SOURCE_SYSTEM = "system"
SOURCE_AUX = "aux"

Chooser = Callable[[str], str]


# ── Data ────────────────────────────────────────────────────────


@dataclass
class BuildPlan:
    """Everything decided before the first side effect."""

    aux_roots: list[str] = field(default_factory=list)
    system_roots: list[str] = field(default_factory=list)
    resolution: ResolutionResult = field(default_factory=ResolutionResult)
    batches: list[list[str]] = field(default_factory=list)       # package names
    bases: list[list[str]] = field(default_factory=list)         # package bases
    members: dict[str, list[str]] = field(default_factory=dict)  # base -> package names
    system_upgrades: list[VersionRef] = field(default_factory=list)

    @property
    def plan(self) -> InstallationPlan:
        return self.resolution.plan

    @property
    def empty(self) -> bool:
        return not self.bases and not self.plan.marks and not self.system_upgrades

    def to_dict(self) -> dict:
        return {
            "aux_roots": self.aux_roots,
            "system_roots": self.system_roots,
            "batches": self.batches,
            "bases": self.bases,
            "system_marks": self.plan.to_dict(),
            "system_upgrades": [ref.key for ref in self.system_upgrades],
            "conflicts": self.resolution.conflicts,
        }


@dataclass
class ExecutionReport:
    """Receipts of an executed BuildPlan, in execution order."""

    receipts: list[Receipt] = field(default_factory=list)
    installed_bases: list[str] = field(default_factory=list)

    @property
    def failed(self) -> Receipt | None:
        return next((r for r in self.receipts if r.failed), None)

    @property
    def ok(self) -> bool:
        return self.failed is None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "installed_bases": self.installed_bases,
            "receipts": [r.model_dump() for r in self.receipts],
        }


# ── Catalog ─────────────────────────────────────────────────────


def build_catalog(
    settings: Settings,
    *,
    refresh: bool = False,
    system: SystemIndex | None = None,
    auxiliary: dict | None = None,
) -> Catalog:
    """Load both package sources and detect the active system."""
    if auxiliary is None:
        auxiliary = load_aux_archive(
            settings.mpr_url,
            settings.cache_dir,
            settings.archive_max_age,
            refresh=refresh,
        )
    if system is None:
        system = load_system_index(settings.dpkg_status, settings.apt_lists_dir)
    distro_arch = current_distro_arch(settings.distro, settings.arch)
    logger.info(
        "Catalog ready: %d auxiliary, %d system packages (%s/%s)",
        len(auxiliary), len(system), distro_arch.distro or "*", distro_arch.arch or "*",
    )
    return Catalog(system=system, auxiliary=auxiliary, distro_arch=distro_arch)


# ── Planning ────────────────────────────────────────────────────


def classify_requests(
    names: list[str],
    catalog: Catalog,
    *,
    prefer: str | None = None,
    choose: Chooser | None = None,
) -> tuple[list[str], list[str]]:
    """Split requested names into ``(aux_roots, system_roots)``.

    A name in both sources goes where ``prefer`` says; without it,
    ``choose(name)`` is asked; without that, the system index wins.

    Raises:
        UnknownPackage: Listing every name found in neither source.
    """
    names = list(dict.fromkeys(names))
    missing = [n for n in names if not catalog.in_system(n) and not catalog.has_aux(n)]
    if missing:
        raise UnknownPackage(missing)

    aux_roots: list[str] = []
    system_roots: list[str] = []
    for name in names:
        in_system = catalog.in_system(name)
        in_aux = catalog.has_aux(name)
        if in_system and in_aux:
            source = prefer or (choose(name) if choose else SOURCE_SYSTEM)
        else:
            source = SOURCE_SYSTEM if in_system else SOURCE_AUX
        (system_roots if source == SOURCE_SYSTEM else aux_roots).append(name)

    return aux_roots, system_roots


def plan_install(
    aux_roots: list[str],
    system_roots: list[str],
    catalog: Catalog,
    *,
    recursion_limit: int = 50,
) -> BuildPlan:
    """Resolve, order and collapse; no side effects.

    Raises:
        ResolutionError: Any failure of the resolver or planner.
    """
    plan = InstallationPlan()
    for name in system_roots:
        refs = catalog.system_versions_satisfying(name)
        if not refs:
            raise UnknownPackage([name])
        plan.mark_install(refs[0], auto_installed=False, reason="requested")

    logger.info("Resolving %d auxiliary package(s)", len(aux_roots))
    if aux_roots:
        resolution = resolve(aux_roots, catalog, recursion_limit=recursion_limit, plan=plan)
    else:
        resolution = ResolutionResult(plan=plan)

    logger.info("Ordering %d auxiliary package(s)", len(resolution.unique_packages))
    batches = order_packages(resolution.packages, catalog, resolution.dependencies)
    bases = plan_build_order(batches, catalog, resolution.dependencies)

    members: dict[str, list[str]] = {}
    for name in resolution.unique_packages:
        members.setdefault(catalog.base_of(name), []).append(name)

    return BuildPlan(
        aux_roots=list(aux_roots),
        system_roots=list(system_roots),
        resolution=resolution,
        batches=batches,
        bases=bases,
        members=members,
    )


def upgrade_candidates(
    catalog: Catalog,
    *,
    include_aux: bool = True,
    include_system: bool = True,
) -> tuple[list[str], list[VersionRef]]:
    """Installed packages with something newer available.

    Returns:
        ``(aux_roots, system_upgrades)``: auxiliary-built packages whose
        repository version is newer than the installed one, and system
        packages whose candidate is newer than the installed one.
    """
    aux_roots: list[str] = []
    if include_aux:
        for ref in catalog.system.installed_from_auxiliary():
            record = catalog.aux_record(ref.name)
            if record and catalog.comparator.compare(record.version, ref.version) > 0:
                aux_roots.append(ref.name)

    system_upgrades: list[VersionRef] = []
    if include_system:
        aux_installed = {ref.name for ref in catalog.system.installed_from_auxiliary()}
        system_upgrades = [
            ref for ref in catalog.system.upgradable() if ref.name not in aux_installed
        ]
    return aux_roots, system_upgrades


# ── Execution ───────────────────────────────────────────────────


def build_registry(mock_mode: bool = False) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register(GitAdapter())
    registry.register(MakedebAdapter())
    registry.register(AptAdapter())
    if mock_mode:
        registry.set_mock_mode(True, MockAdapter())
    return registry


def _select_artifacts(artifacts: list[str], wanted: list[str]) -> list[str]:
    """Keep ``name_version_arch.deb`` files whose name was resolved; all if none match."""
    selected = [a for a in artifacts if Path(a).name.split("_", 1)[0] in wanted]
    return selected or list(artifacts)


def execute_build_plan(
    build_plan: BuildPlan,
    settings: Settings,
    registry: AdapterRegistry,
) -> ExecutionReport:
    """Commit system marks, then clone, build and install each batch in order."""
    report = ExecutionReport()

    def run(action: Action) -> Receipt:
        receipt = registry.execute_action(action, work_dir=settings.cache_dir)
        report.receipts.append(receipt)
        if receipt.failed:
            logger.error("%s failed: %s", action.id, receipt.error)
        return receipt

    plan = build_plan.plan
    if plan.marks:
        logger.info("Installing %d system package(s)", len(plan.marks))
        receipt = run(Action(
            id="system:install",
            adapter="apt",
            target="system",
            params={
                "packages": [f"{m.name}={m.version}" for m in plan.marks.values()],
                "auto": plan.auto_names,
            },
        ))
        if receipt.failed:
            return report

    if build_plan.system_upgrades:
        logger.info("Upgrading %d system package(s)", len(build_plan.system_upgrades))
        receipt = run(Action(
            id="system:upgrade",
            adapter="apt",
            target="system",
            params={
                "packages": [f"{r.name}={r.version}" for r in build_plan.system_upgrades],
                "only_upgrade": True,
            },
        ))
        if receipt.failed:
            return report

    roots = set(build_plan.aux_roots)
    for index, batch in enumerate(build_plan.bases):
        logger.info("Batch %d/%d: %s", index + 1, len(build_plan.bases), ", ".join(batch))
        debs: list[str] = []
        auto: list[str] = []

        for base in batch:
            path = str(settings.git_dir / base)
            receipt = run(Action(
                id=f"clone:{base}",
                adapter="git",
                target=base,
                params={
                    "operation": "sync",
                    "url": settings.base_url(base),
                    "path": path,
                    "branch": settings.git_branch,
                },
            ))
            if receipt.failed:
                return report

            receipt = run(Action(
                id=f"build:{base}",
                adapter="makedeb",
                target=base,
                params={"path": path, "command": settings.build_command},
            ))
            if receipt.failed:
                return report

            wanted = build_plan.members.get(base, [base])
            debs.extend(_select_artifacts(receipt.artifacts, wanted))
            auto.extend(name for name in wanted if name not in roots)

        if not debs:
            logger.warning("Batch %d produced nothing to install", index + 1)
            continue

        receipt = run(Action(
            id=f"install:batch-{index + 1}",
            adapter="apt",
            target=",".join(batch),
            params={"debs": debs, "auto": auto},
        ))
        if receipt.failed:
            return report
        report.installed_bases.extend(batch)

    return report
