"""
Package model — catalog records shared by the system index and the auxiliary repository.

A PackageRecord is the read-only metadata the resolver and planner consult.
Dependency-like relations are stored per ``(distro, arch)`` key, following
the makedeb convention of distro- and architecture-specific variables
(``focal_depends``, ``depends_amd64``, ``focal_depends_amd64``).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class Origin(str, Enum):
    """Which catalog a record comes from."""

    SYSTEM = "system"
    AUXILIARY = "auxiliary"


class KeyKind(str, Enum):
    """The four shapes a DistroArchKey can take."""

    DISTRO_ARCH = "distro_arch"
    DISTRO = "distro"
    ARCH = "arch"
    GENERIC = "generic"


# Most specific first.
SPECIFICITY_ORDER = (KeyKind.DISTRO_ARCH, KeyKind.DISTRO, KeyKind.ARCH, KeyKind.GENERIC)


@dataclass(frozen=True)
class DistroArchKey:
    """Tagged ``(distro, arch)`` key of a DependencyTable entry."""

    distro: str | None = None
    arch: str | None = None

    @property
    def kind(self) -> KeyKind:
        if self.distro and self.arch:
            return KeyKind.DISTRO_ARCH
        if self.distro:
            return KeyKind.DISTRO
        if self.arch:
            return KeyKind.ARCH
        return KeyKind.GENERIC

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``focal/amd64`` or ``*/amd64``."""
        return f"{self.distro or '*'}/{self.arch or '*'}"


GENERIC_KEY = DistroArchKey()


class DistroArch(NamedTuple):
    """The running system's distro codename and Debian architecture."""

    distro: str | None = None
    arch: str | None = None


def specificity_keys(distro: str | None, arch: str | None) -> list[DistroArchKey]:
    """Lookup keys for the active system, most specific first.

    Keys that need a component the system could not report are skipped,
    so an unknown architecture never matches an ``arch``-qualified entry.
    """
    candidates = {
        KeyKind.DISTRO_ARCH: DistroArchKey(distro, arch) if distro and arch else None,
        KeyKind.DISTRO: DistroArchKey(distro, None) if distro else None,
        KeyKind.ARCH: DistroArchKey(None, arch) if arch else None,
        KeyKind.GENERIC: GENERIC_KEY,
    }
    return [candidates[kind] for kind in SPECIFICITY_ORDER if candidates[kind] is not None]


class DependencyTable:
    """Dependency expressions of one relation, keyed by DistroArchKey.

    Tables are never merged across keys: the first present, non-empty
    entry in specificity order is the whole answer.
    """

    def __init__(self, entries: dict[DistroArchKey, list[str]] | None = None):
        self.entries: dict[DistroArchKey, list[str]] = dict(entries or {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyTable):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"DependencyTable({self.to_dict()!r})"

    @classmethod
    def generic(cls, expressions: list[str]) -> DependencyTable:
        """Build a table holding only an unqualified entry."""
        return cls({GENERIC_KEY: list(expressions)} if expressions else {})

    def add(self, key: DistroArchKey, expressions: list[str]) -> None:
        self.entries.setdefault(key, []).extend(expressions)

    def select(self, distro: str | None, arch: str | None) -> list[str] | None:
        """Return the most specific non-empty entry, or None."""
        for key in specificity_keys(distro, arch):
            expressions = self.entries.get(key)
            if expressions:
                return list(expressions)
        return None

    def to_dict(self) -> dict[str, list[str]]:
        return {key.label: list(exprs) for key, exprs in self.entries.items()}

    def __bool__(self) -> bool:
        return any(self.entries.values())


class PackageRecord(BaseModel):
    """One installable package as seen by the catalog.

    ``base`` groups packages built from the same source checkout;
    system records use their source package name (or their own name).
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    base: str = ""
    version: str
    origin: Origin = Origin.AUXILIARY
    description: str = ""
    maintainer: str | None = None

    depends: DependencyTable = Field(default_factory=DependencyTable)
    makedepends: DependencyTable = Field(default_factory=DependencyTable)
    checkdepends: DependencyTable = Field(default_factory=DependencyTable)
    conflicts: DependencyTable = Field(default_factory=DependencyTable)
    provides: DependencyTable = Field(default_factory=DependencyTable)

    def model_post_init(self, __context: object) -> None:
        if not self.base:
            self.base = self.name

    def dependency_tables(self) -> tuple[DependencyTable, DependencyTable, DependencyTable]:
        """Runtime, build-time and check relations, in resolution order."""
        return (self.depends, self.makedepends, self.checkdepends)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "base": self.base,
            "version": self.version,
            "origin": self.origin.value,
            "description": self.description,
            "maintainer": self.maintainer,
            "depends": self.depends.to_dict(),
            "makedepends": self.makedepends.to_dict(),
            "checkdepends": self.checkdepends.to_dict(),
            "conflicts": self.conflicts.to_dict(),
            "provides": self.provides.to_dict(),
        }


class VersionRef(BaseModel):
    """A concrete version of a system package, as known to the system index."""

    name: str
    version: str
    provides: dict[str, str | None] = Field(default_factory=dict)
    installed: bool = False
    candidate: bool = False
    from_auxiliary: bool = False   # installed package built from the auxiliary repository

    @property
    def key(self) -> str:
        return f"{self.name}={self.version}"
