"""
L2 Resolver — Auxiliary package resolution.

Walks the dependency expressions of requested auxiliary packages and
decides, alternative by alternative, whether each is satisfied from the
system index (marked in the InstallationPlan) or from the auxiliary
repository (resolved recursively and added to the result).

The system index always wins when it can satisfy an alternative.
"""

from __future__ import annotations

import logging

from auxpkg.core.models import InstallationPlan, ResolutionResult
from auxpkg.core.services.aux_install.catalog import Catalog
from auxpkg.core.services.aux_install.domain import (
    Alternative,
    CyclicDependency,
    RecursionExceeded,
    UnknownPackage,
    UnsatisfiableDependency,
    parse_expression,
)

logger = logging.getLogger(__name__)

DEFAULT_RECURSION_LIMIT = 50


class PackageResolver:
    """One resolution run over a Catalog snapshot.

    The resolver owns its working state; the ``plan`` it marks into is
    either passed in (so the caller can pre-mark requested system
    packages) or created fresh.
    """

    def __init__(
        self,
        catalog: Catalog,
        *,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
        plan: InstallationPlan | None = None,
    ):
        if recursion_limit < 1:
            raise ValueError(f"recursion_limit must be at least 1, got {recursion_limit}")
        self.catalog = catalog
        self.recursion_limit = recursion_limit
        self.plan = plan if plan is not None else InstallationPlan()
        self._resolved: dict[str, list[str]] = {}
        self._in_progress: list[str] = []
        self._conflicts: dict[str, list[str]] = {}
        self._chosen: dict[str, list[str]] = {}

    def resolve(self, root_names: list[str]) -> ResolutionResult:
        """Resolve every root and return the combined result.

        Raises:
            UnknownPackage: A root is not in the auxiliary repository.
            UnsatisfiableDependency: An expression had no usable alternative.
            RecursionExceeded: A chain went deeper than ``recursion_limit``.
            CyclicDependency: A package (transitively) depends on itself.
        """
        missing = [name for name in root_names if not self.catalog.has_aux(name)]
        if missing:
            raise UnknownPackage(missing)

        result = ResolutionResult(roots=list(root_names), plan=self.plan)
        for root in root_names:
            names = list(dict.fromkeys(self._resolve_package(root, depth=1)))
            result.per_root[root] = names
            result.packages.extend(names)
            logger.debug("Resolved %s -> %s", root, names)

        result.conflicts = dict(self._conflicts)
        result.dependencies = {name: list(deps) for name, deps in self._chosen.items()}
        return result

    # ── Internals ──────────────────────────────────────────────

    def _resolve_package(self, name: str, depth: int) -> list[str]:
        if depth > self.recursion_limit:
            raise RecursionExceeded(self.recursion_limit, name)
        if name in self._resolved:
            return list(self._resolved[name])
        if name in self._in_progress:
            start = self._in_progress.index(name)
            raise CyclicDependency(self._in_progress[start:])

        record = self.catalog.aux_record(name)
        if record is None:
            raise UnknownPackage([name])

        self._in_progress.append(name)
        try:
            found = [name]
            chosen: list[str] = []
            for expression in self.catalog.dependency_expressions(record):
                pulled = self._satisfy(name, expression, depth)
                if pulled:
                    chosen.append(pulled[0])
                found.extend(pulled)
        finally:
            self._in_progress.pop()

        conflicts = self.catalog.conflicts(record)
        if conflicts:
            self._conflicts[name] = conflicts

        self._chosen[name] = list(dict.fromkeys(chosen))
        self._resolved[name] = found
        return list(found)

    def _satisfy(self, requester: str, expression: str, depth: int) -> list[str]:
        """Satisfy one expression; return the auxiliary names it pulled in."""
        try:
            parsed = parse_expression(expression)
        except ValueError as e:
            raise UnsatisfiableDependency(requester, expression) from e

        for alt in parsed.alternatives:
            if self._satisfy_from_system(requester, alt):
                return []
            pulled = self._satisfy_from_auxiliary(alt, depth)
            if pulled is not None:
                logger.debug("%s: '%s' satisfied by auxiliary %s", requester, expression, alt.name)
                return pulled

        raise UnsatisfiableDependency(requester, expression)

    def _satisfy_from_system(self, requester: str, alt: Alternative) -> bool:
        if not self.catalog.in_system(alt.name):
            return False

        refs = self.catalog.system_versions_satisfying(alt.name, alt.operator, alt.version)
        if not refs:
            logger.debug("%s: no system version of %s meets %s", requester, alt.name, alt)
            return False

        for ref in refs:
            if self.plan.is_marked(ref.name, ref.version) or (
                ref.installed and ref.candidate and not self.plan.is_marked(ref.name)
            ):
                logger.debug("%s: '%s' already satisfied by system %s", requester, alt, ref.key)
                return True

        # A name is installed at one version only.
        unmarked = [ref for ref in refs if not self.plan.is_marked(ref.name)]
        if not unmarked:
            logger.debug("%s: '%s' conflicts with an existing mark", requester, alt)
            return False

        chosen = unmarked[0]
        self.plan.mark_install(chosen, auto_installed=True, reason=requester)
        logger.debug("%s: marked system %s for '%s'", requester, chosen.key, alt)
        return True

    def _satisfy_from_auxiliary(self, alt: Alternative, depth: int) -> list[str] | None:
        record = self.catalog.aux_record(alt.name)
        if record is None:
            return None
        if not self.catalog.comparator.satisfies(record.version, alt.operator, alt.version):
            logger.debug("Auxiliary %s %s does not meet %s", record.name, record.version, alt)
            return None
        return self._resolve_package(record.name, depth + 1)


def resolve(
    root_names: list[str],
    catalog: Catalog,
    *,
    recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    plan: InstallationPlan | None = None,
) -> ResolutionResult:
    """Resolve ``root_names`` against ``catalog``.

    Convenience wrapper around :class:`PackageResolver` for one run.
    """
    resolver = PackageResolver(catalog, recursion_limit=recursion_limit, plan=plan)
    return resolver.resolve(root_names)
