"""
L2 Planner — Installation batches for auxiliary packages.

Assigns every auxiliary package to a batch so that each package comes
strictly after all auxiliary packages it depends on. The assignment is
an iterative relaxation: start with everything in batch 0 and keep
pushing a package one batch past a dependency found at or after its
own position, restarting the scan after every move, until a full pass
makes no move.

Relaxation never terminates on a cycle, so the dependency graph is
checked first and any cycle fails fast with CyclicDependency.

Without resolver output every alternative of every expression is an
edge. Given the alternatives a resolution run actually chose, only
those are, so an alternative satisfied from the system index cannot
introduce a cycle.
"""

from __future__ import annotations

import logging

from auxpkg.core.services.aux_install.catalog import Catalog
from auxpkg.core.services.aux_install.domain import (
    CyclicDependency,
    UnknownPackage,
    dependency_names,
    find_cycles,
)

logger = logging.getLogger(__name__)


def dependency_graph(names: list[str], catalog: Catalog) -> dict[str, list[str]]:
    """Edges ``p -> q`` where another tracked package ``q`` satisfies a dependency of ``p``.

    A package satisfies a dependency name when it is that name or
    provides it. Every alternative of every expression counts, so a
    package is ordered after any tracked package it might use.

    Raises:
        UnknownPackage: A name is not in the auxiliary repository.
    """
    missing = [n for n in names if not catalog.has_aux(n)]
    if missing:
        raise UnknownPackage(missing)

    records = {n: catalog.aux_record(n) for n in names}
    provided = {n: catalog.provided_names(rec) for n, rec in records.items()}

    graph: dict[str, list[str]] = {}
    for name, record in records.items():
        wanted = dependency_names(catalog.dependency_expressions(record))
        graph[name] = [
            other for other in names
            if other != name and provided[other] & wanted
        ]
    return graph


def chosen_graph(names: list[str], chosen: dict[str, list[str]]) -> dict[str, list[str]]:
    """Edges restricted to the auxiliary dependencies a resolver picked."""
    tracked = set(names)
    return {
        name: [dep for dep in chosen.get(name, []) if dep in tracked and dep != name]
        for name in names
    }


def _find_move(batches: list[list[str]], graph: dict[str, list[str]]) -> tuple[int, str, int] | None:
    """First ``(i, p, j)`` where ``p`` in batch ``i`` depends on something in batch ``j >= i``."""
    for i, batch in enumerate(batches):
        for pkg in batch:
            deps = graph[pkg]
            if not deps:
                continue
            for j in range(i, len(batches)):
                if any(other in deps for other in batches[j]):
                    return i, pkg, j
    return None


def order_packages(
    aux_names: list[str],
    catalog: Catalog,
    chosen: dict[str, list[str]] | None = None,
) -> list[list[str]]:
    """Order auxiliary packages into installation batches.

    Args:
        aux_names: Auxiliary package names; duplicates are ignored,
            first occurrence keeps its position.
        catalog: Source of dependency and provides data.
        chosen: ``ResolutionResult.dependencies``; when given, only the
            chosen alternatives order packages.

    Returns:
        Non-empty batches, first to install first. Order inside a
        batch follows input order.

    Raises:
        CyclicDependency: The packages depend on each other in a loop.
        UnknownPackage: A name is not in the auxiliary repository.
    """
    names = list(dict.fromkeys(aux_names))
    if not names:
        return []

    if chosen is None:
        graph = dependency_graph(names, catalog)
    else:
        missing = [n for n in names if not catalog.has_aux(n)]
        if missing:
            raise UnknownPackage(missing)
        graph = chosen_graph(names, chosen)
    cycles = find_cycles(graph)
    if cycles:
        raise CyclicDependency(cycles[0])

    batches: list[list[str]] = [list(names)]
    while True:
        move = _find_move(batches, graph)
        if move is None:
            break
        i, pkg, j = move
        batches[i].remove(pkg)
        if j + 1 == len(batches):
            batches.append([])
        batches[j + 1].append(pkg)
        logger.debug("Moved %s from batch %d to batch %d", pkg, i, j + 1)

    result = [batch for batch in batches if batch]
    logger.debug("Install order: %s", result)
    return result
