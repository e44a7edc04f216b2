"""
L3 Catalog — Merged read-only view of both package sources.

A name can resolve to zero, one or two records: one from the system
index and one from the auxiliary repository. The Catalog also knows the
active ``(distro, arch)`` so relation lookups apply the specificity
fallback in a single place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from auxpkg.core.models import DistroArch, PackageRecord, VersionRef
from auxpkg.core.services.aux_install.catalog.system_index import SystemIndex
from auxpkg.core.services.aux_install.domain import (
    DEFAULT_COMPARATOR,
    VersionComparator,
    provided_names,
)

logger = logging.getLogger(__name__)


@dataclass
class CatalogEntry:
    """What each source knows about one name."""

    name: str
    system: PackageRecord | None = None
    auxiliary: PackageRecord | None = None

    @property
    def found(self) -> bool:
        return self.system is not None or self.auxiliary is not None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "system": self.system.to_dict() if self.system else None,
            "auxiliary": self.auxiliary.to_dict() if self.auxiliary else None,
        }


class Catalog:
    """Union of the system index and the auxiliary repository, keyed by name."""

    def __init__(
        self,
        system: SystemIndex | None = None,
        auxiliary: dict[str, PackageRecord] | Iterable[PackageRecord] = (),
        distro_arch: DistroArch = DistroArch(),
        comparator: VersionComparator = DEFAULT_COMPARATOR,
    ):
        self.system = system if system is not None else SystemIndex(comparator=comparator)
        if isinstance(auxiliary, dict):
            self.auxiliary = dict(auxiliary)
        else:
            self.auxiliary = {rec.name: rec for rec in auxiliary}
        self.distro_arch = distro_arch
        self.comparator = comparator

    # ── Lookup ─────────────────────────────────────────────────

    def lookup(self, name: str) -> CatalogEntry:
        return CatalogEntry(
            name=name,
            system=self.system.record(name),
            auxiliary=self.auxiliary.get(name),
        )

    def in_system(self, name: str) -> bool:
        """Whether the system index has ``name`` itself or a provider of it."""
        return self.system.has(name)

    def has_aux(self, name: str) -> bool:
        return name in self.auxiliary

    def aux_record(self, name: str) -> PackageRecord | None:
        return self.auxiliary.get(name)

    def is_candidate_installed(self, name: str) -> bool:
        return self.system.is_candidate_installed(name)

    def system_versions_satisfying(
        self,
        name: str,
        operator: str | None = None,
        version: str | None = None,
    ) -> list[VersionRef]:
        """System versions that fulfil ``name [operator version]``.

        Real versions of ``name`` come first (candidate, then newest to
        oldest), followed by packages that provide ``name``. A provider
        is matched on the version it declares for the provided name, or
        on its own version when it declares none.
        """
        found: list[VersionRef] = []
        for ref in self.system.versions(name):
            if self.comparator.satisfies(ref.version, operator, version):
                found.append(ref)
        for ref, provided_version in self.system.providers(name):
            effective = provided_version or ref.version
            if self.comparator.satisfies(effective, operator, version):
                found.append(ref)
        return found

    # ── Relations (specificity-aware) ──────────────────────────

    def selected(self, record: PackageRecord, relation: str) -> list[str]:
        """The most specific non-empty entry of ``relation`` for the active system."""
        table = getattr(record, relation)
        distro, arch = self.distro_arch
        return table.select(distro, arch) or []

    def dependency_expressions(self, record: PackageRecord) -> list[str]:
        """Runtime, build and check dependencies concatenated in that order."""
        return (
            self.selected(record, "depends")
            + self.selected(record, "makedepends")
            + self.selected(record, "checkdepends")
        )

    def conflicts(self, record: PackageRecord) -> list[str]:
        return self.selected(record, "conflicts")

    def provided_names(self, record: PackageRecord) -> set[str]:
        """Names ``record`` satisfies: its own plus everything it provides."""
        names = {record.name}
        names.update(provided_names(self.selected(record, "provides")))
        return names

    def base_of(self, name: str) -> str:
        record = self.auxiliary.get(name)
        return record.base if record else name

    def bases(self) -> set[str]:
        """Every package base the auxiliary repository publishes."""
        return {rec.base for rec in self.auxiliary.values()}

    # ── Search ─────────────────────────────────────────────────

    def search(
        self,
        queries: list[str] = (),
        *,
        source: str | None = None,
        installed_only: bool = False,
    ) -> list[CatalogEntry]:
        """Entries whose name or description contains any of ``queries``.

        Names match case-sensitively, descriptions case-insensitively.
        With no queries every known name is returned.

        Args:
            queries: Substrings to look for.
            source: ``"system"`` or ``"aux"`` to keep only names that
                source knows about.
            installed_only: Keep only names with an installed version.
        """
        names = sorted(set(self.system.names()) | set(self.auxiliary))
        found = []
        for name in names:
            if installed_only and self.system.installed(name) is None:
                continue
            entry = self.lookup(name)
            if source == "system" and entry.system is None:
                continue
            if source == "aux" and entry.auxiliary is None:
                continue
            if queries and not any(_matches(entry, q) for q in queries):
                continue
            found.append(entry)
        return found


def _matches(entry: CatalogEntry, query: str) -> bool:
    if query in entry.name:
        return True
    needle = query.lower()
    return any(
        rec is not None and needle in rec.description.lower()
        for rec in (entry.system, entry.auxiliary)
    )
