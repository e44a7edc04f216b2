"""
Builders for catalogs and records used across the test suite.
"""

from __future__ import annotations

import gzip
import json

from auxpkg.core.models import DependencyTable, DistroArch, PackageRecord, VersionRef
from auxpkg.core.services.aux_install.catalog import Catalog, SystemIndex


def aux(
    name: str,
    version: str = "1.0",
    *,
    depends: list[str] | None = None,
    makedepends: list[str] | None = None,
    checkdepends: list[str] | None = None,
    conflicts: list[str] | None = None,
    provides: list[str] | None = None,
    base: str = "",
) -> PackageRecord:
    """Auxiliary record with unqualified relations only."""
    return PackageRecord(
        name=name,
        base=base,
        version=version,
        depends=DependencyTable.generic(depends or []),
        makedepends=DependencyTable.generic(makedepends or []),
        checkdepends=DependencyTable.generic(checkdepends or []),
        conflicts=DependencyTable.generic(conflicts or []),
        provides=DependencyTable.generic(provides or []),
    )


def sysref(
    name: str,
    version: str = "1.0",
    *,
    installed: bool = False,
    provides: dict[str, str | None] | None = None,
    from_auxiliary: bool = False,
) -> VersionRef:
    return VersionRef(
        name=name,
        version=version,
        installed=installed,
        provides=provides or {},
        from_auxiliary=from_auxiliary,
    )


def make_catalog(
    aux_records: list[PackageRecord] = (),
    system_refs: list[VersionRef] = (),
    distro: str | None = "jammy",
    arch: str | None = "amd64",
) -> Catalog:
    return Catalog(
        system=SystemIndex(system_refs),
        auxiliary=list(aux_records),
        distro_arch=DistroArch(distro, arch),
    )


def gz_archive(entries: list[dict]) -> bytes:
    """Compressed archive bytes as served by the auxiliary repository."""
    return gzip.compress(json.dumps(entries).encode("utf-8"))
