"""
Plan models — what a resolution run decided.

InstallationPlan is the explicit, mutable record of system-side marks.
It is threaded through the resolver instead of mutating the system
engine in place; the orchestration layer hands it to the apt adapter
only once resolution and ordering have both succeeded.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from auxpkg.core.models.package import VersionRef


class SystemMark(BaseModel):
    """A system package version marked for installation."""

    name: str
    version: str
    auto_installed: bool = True
    reason: str = ""              # requesting package, or "requested"


class InstallationPlan(BaseModel):
    """System-side marks accumulated during one resolution run."""

    marks: dict[str, SystemMark] = Field(default_factory=dict)

    def mark_install(
        self,
        ref: VersionRef,
        auto_installed: bool = True,
        reason: str = "",
    ) -> SystemMark:
        """Mark ``ref`` for installation.

        A package marked manually stays manual even if a later
        dependency marks it again as automatic.

        Raises:
            ValueError: ``ref.name`` is already marked at another version.
        """
        existing = self.marks.get(ref.name)
        if existing is not None:
            if existing.version != ref.version:
                raise ValueError(
                    f"{ref.name} is already marked at {existing.version}, not {ref.version}"
                )
            existing.auto_installed = existing.auto_installed and auto_installed
            return existing
        mark = SystemMark(
            name=ref.name,
            version=ref.version,
            auto_installed=auto_installed,
            reason=reason,
        )
        self.marks[ref.name] = mark
        return mark

    def is_marked(self, name: str, version: str | None = None) -> bool:
        """Whether ``name`` is marked, at ``version`` when one is given."""
        mark = self.marks.get(name)
        if mark is None:
            return False
        return version is None or mark.version == version

    @property
    def package_names(self) -> list[str]:
        return list(self.marks)

    @property
    def auto_names(self) -> list[str]:
        return [m.name for m in self.marks.values() if m.auto_installed]

    def to_dict(self) -> list[dict]:
        return [m.model_dump() for m in self.marks.values()]


class ResolutionResult(BaseModel):
    """Outcome of resolving a set of auxiliary root packages.

    ``packages`` is grouped by root and may contain the same name more
    than once when several roots pull it in; ordering is the planner's job.
    """

    roots: list[str] = Field(default_factory=list)
    packages: list[str] = Field(default_factory=list)
    per_root: dict[str, list[str]] = Field(default_factory=dict)
    conflicts: dict[str, list[str]] = Field(default_factory=dict)
    # auxiliary packages each package's chosen alternatives resolved to
    dependencies: dict[str, list[str]] = Field(default_factory=dict)
    plan: InstallationPlan = Field(default_factory=InstallationPlan)

    @property
    def unique_packages(self) -> list[str]:
        """Packages in first-seen order, without duplicates."""
        return list(dict.fromkeys(self.packages))

    def to_dict(self) -> dict:
        return {
            "roots": self.roots,
            "packages": self.unique_packages,
            "per_root": self.per_root,
            "conflicts": self.conflicts,
            "dependencies": self.dependencies,
            "system_marks": self.plan.to_dict(),
        }
