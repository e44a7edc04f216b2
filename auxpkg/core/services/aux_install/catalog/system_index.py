"""
L3 Catalog — System package index.

Read-only view of the primary package index: what is installed
(dpkg status) and what is available (apt ``*_Packages`` lists).
Parsed with ``debian.deb822``; candidate selection is simply the
highest available version in Debian ordering.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from debian import deb822

from auxpkg.core.models import DependencyTable, Origin, PackageRecord, VersionRef
from auxpkg.core.services.aux_install.domain import (
    DEFAULT_COMPARATOR,
    VersionComparator,
    provided_names,
)

logger = logging.getLogger(__name__)

_INSTALLED_STATUS = "install ok installed"


class SystemIndex:
    """All known system package versions, with provides and candidates.

    Args:
        refs: Every known ``(name, version)``; duplicates are merged and
            a version is installed if any duplicate says so.
        comparator: Ordering used to pick each name's candidate.
        details: Optional ``{ref.key: paragraph fields}`` used by
            :meth:`record` for display.
    """

    def __init__(
        self,
        refs: Iterable[VersionRef] = (),
        comparator: VersionComparator = DEFAULT_COMPARATOR,
        details: dict[str, dict[str, str]] | None = None,
    ):
        self.comparator = comparator
        self._details = details or {}
        self._by_name: dict[str, list[VersionRef]] = {}
        self._providers: dict[str, list[tuple[VersionRef, str | None]]] = {}

        merged: dict[str, VersionRef] = {}
        for ref in refs:
            existing = merged.get(ref.key)
            if existing is None:
                merged[ref.key] = ref.model_copy(deep=True)
                continue
            existing.installed = existing.installed or ref.installed
            existing.from_auxiliary = existing.from_auxiliary or ref.from_auxiliary
            for name, version in ref.provides.items():
                existing.provides.setdefault(name, version)

        for ref in merged.values():
            self._by_name.setdefault(ref.name, []).append(ref)
            for provided, version in ref.provides.items():
                if provided != ref.name:
                    self._providers.setdefault(provided, []).append((ref, version))

        for name, versions in self._by_name.items():
            versions.sort(key=lambda r: comparator.sort_key(r.version), reverse=True)
            for ref in versions:
                ref.candidate = False
            versions[0].candidate = True

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    # ── Queries ────────────────────────────────────────────────

    def has(self, name: str) -> bool:
        """Whether ``name`` is a real package or provided by one."""
        return name in self._by_name or name in self._providers

    def names(self) -> list[str]:
        """Real package names, sorted."""
        return sorted(self._by_name)

    def versions(self, name: str) -> list[VersionRef]:
        """Real versions of ``name``, candidate first then newest to oldest."""
        return list(self._by_name.get(name, []))

    def providers(self, name: str) -> list[tuple[VersionRef, str | None]]:
        """Other packages providing ``name`` with their provided version."""
        return list(self._providers.get(name, []))

    def candidate(self, name: str) -> VersionRef | None:
        versions = self._by_name.get(name)
        return versions[0] if versions else None

    def installed(self, name: str) -> VersionRef | None:
        for ref in self._by_name.get(name, []):
            if ref.installed:
                return ref
        return None

    def is_candidate_installed(self, name: str) -> bool:
        cand = self.candidate(name)
        return cand is not None and cand.installed

    def installed_from_auxiliary(self) -> list[VersionRef]:
        """Installed packages that were built from the auxiliary repository."""
        found = []
        for versions in self._by_name.values():
            for ref in versions:
                if ref.installed and ref.from_auxiliary:
                    found.append(ref)
        return sorted(found, key=lambda r: r.name)

    def upgradable(self) -> list[VersionRef]:
        """Candidates newer than the installed version of the same package."""
        found = []
        for name in sorted(self._by_name):
            current = self.installed(name)
            cand = self.candidate(name)
            if current is None or cand is None or cand is current:
                continue
            if self.comparator.compare(cand.version, current.version) > 0:
                found.append(cand)
        return found

    def record(self, name: str) -> PackageRecord | None:
        """The candidate of ``name`` as a PackageRecord, for display."""
        cand = self.candidate(name)
        if cand is None:
            return None
        fields = self._details.get(cand.key, {})
        return PackageRecord(
            name=cand.name,
            base=fields.get("Source", "").split(" ")[0] or cand.name,
            version=cand.version,
            origin=Origin.SYSTEM,
            description=fields.get("Description", "").split("\n")[0],
            maintainer=fields.get("Maintainer"),
            depends=DependencyTable.generic(_split_relation(fields.get("Depends", ""))),
            conflicts=DependencyTable.generic(_split_relation(fields.get("Conflicts", ""))),
            provides=DependencyTable.generic(_split_relation(fields.get("Provides", ""))),
        )


# ── Loading ────────────────────────────────────────────────────


def _split_relation(value: str) -> list[str]:
    """Split a deb822 relation field into expressions (comma separated)."""
    return [part.strip() for part in value.split(",") if part.strip()]


def _ref_from_paragraph(para: deb822.Deb822, *, installed: bool) -> VersionRef | None:
    name = para.get("Package")
    version = para.get("Version")
    if not name or not version:
        return None
    try:
        provides = provided_names(_split_relation(para.get("Provides", "")))
    except ValueError as e:
        logger.warning("Ignoring malformed Provides of %s: %s", name, e)
        provides = {}
    return VersionRef(
        name=name,
        version=version,
        provides=provides,
        installed=installed,
        from_auxiliary=installed and "MPR-Package" in para,
    )


_DETAIL_FIELDS = ("Source", "Description", "Maintainer", "Depends", "Conflicts", "Provides")


def _read_paragraphs(
    path: Path,
    *,
    status_file: bool,
    refs: list[VersionRef],
    details: dict[str, dict[str, str]],
) -> None:
    with open(path, encoding="utf-8", errors="replace") as fh:
        for para in deb822.Packages.iter_paragraphs(fh, use_apt_pkg=False):
            if status_file:
                installed = para.get("Status", "") == _INSTALLED_STATUS
                if not installed:
                    continue
            else:
                installed = False
            ref = _ref_from_paragraph(para, installed=installed)
            if ref is None:
                continue
            refs.append(ref)
            details.setdefault(
                ref.key,
                {k: para[k] for k in _DETAIL_FIELDS if k in para},
            )


def load_system_index(
    dpkg_status: str | Path,
    apt_lists_dir: str | Path,
    comparator: VersionComparator = DEFAULT_COMPARATOR,
) -> SystemIndex:
    """Build a SystemIndex from the dpkg status file and apt lists.

    Missing files are skipped with a warning; an empty index is valid
    (every dependency then has to come from the auxiliary repository).
    """
    refs: list[VersionRef] = []
    details: dict[str, dict[str, str]] = {}

    status_path = Path(dpkg_status)
    if status_path.is_file():
        _read_paragraphs(status_path, status_file=True, refs=refs, details=details)
    else:
        logger.warning("dpkg status file not found: %s", status_path)

    lists_path = Path(apt_lists_dir)
    list_files = sorted(lists_path.glob("*_Packages")) if lists_path.is_dir() else []
    if not list_files:
        logger.warning("No apt package lists under %s", lists_path)
    for path in list_files:
        _read_paragraphs(path, status_file=False, refs=refs, details=details)

    index = SystemIndex(refs, comparator=comparator, details=details)
    logger.debug("System index: %d package names from %d list file(s)", len(index), len(list_files))
    return index
