"""
L1 Domain — Resolution error taxonomy.

Raised by the resolver and planner, caught by the use cases, which
abort the whole run: nothing is cloned, built or committed after
one of these.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Base class for every failure to produce an install order."""


class UnknownPackage(ResolutionError):
    """Requested names that exist in neither catalog."""

    def __init__(self, names: list[str]):
        self.names = list(names)
        listed = ", ".join(f"'{n}'" for n in self.names)
        super().__init__(f"Unable to find package(s): {listed}")


class UnsatisfiableDependency(ResolutionError):
    """No alternative of a dependency expression could be satisfied."""

    def __init__(self, package: str, expression: str):
        self.package = package
        self.expression = expression
        super().__init__(
            f"Couldn't find a package to satisfy '{expression}' for '{package}'."
        )


class RecursionExceeded(ResolutionError):
    """A dependency chain went deeper than the configured limit."""

    def __init__(self, limit: int, package: str = ""):
        self.limit = limit
        self.package = package
        where = f" at '{package}'" if package else ""
        super().__init__(
            f"Went over the recursion limit ({limit}) while resolving "
            f"auxiliary dependencies{where}. Try increasing it via the "
            f"'recursion_limit' setting (AUXPKG_RECURSION_LIMIT)."
        )


class CyclicDependency(ResolutionError):
    """Auxiliary packages that depend on each other in a loop."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        path = " -> ".join([*self.cycle, self.cycle[0]]) if self.cycle else ""
        super().__init__(f"Dependency cycle between auxiliary packages: {path}")
