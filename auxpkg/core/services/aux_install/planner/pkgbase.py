"""
L2 Planner — Package-base collapsing.

Several package names can be built from one source checkout (their
package base). After ordering, names are replaced by their base and a
base is scheduled only at its earliest position; later occurrences
are dropped.
"""

from __future__ import annotations

import logging

from auxpkg.core.services.aux_install.catalog import Catalog
from auxpkg.core.services.aux_install.planner.install_order import chosen_graph, dependency_graph

logger = logging.getLogger(__name__)


class PackageBase(str):
    """A name that has already been mapped to its package base."""


def _base_for(name: str, catalog: Catalog) -> PackageBase:
    # A base may share its name with another package, so only
    # collapsed output is left as it is.
    if isinstance(name, PackageBase):
        return name
    return PackageBase(catalog.base_of(name))


def collapse_to_bases(batches: list[list[str]], catalog: Catalog) -> list[list[str]]:
    """Map package names to bases and keep each base only where it first appears.

    Batches left empty are removed. Returned names are
    :class:`PackageBase` instances, so running this on its own output
    returns the same batches.
    """
    seen: set[str] = set()
    collapsed: list[list[str]] = []

    for batch in batches:
        bases: list[str] = []
        for name in batch:
            base = _base_for(name, catalog)
            if base in seen:
                continue
            seen.add(base)
            bases.append(base)
        if bases:
            collapsed.append(bases)

    return collapsed


def find_underordered_bases(
    batches: list[list[str]],
    catalog: Catalog,
    chosen: dict[str, list[str]] | None = None,
) -> list[dict]:
    """Dropped occurrences whose dependencies land at or after the retained batch.

    When a base is kept at batch ``i`` but a second package of that base
    was ordered at batch ``k > i``, the second package's auxiliary
    dependencies ordered in batches ``i..k-1`` would be built after the
    base that needs them.

    Returns:
        ``[{"base": ..., "package": ..., "dependency": ..., "kept_batch": i, "dependency_batch": j}]``
    """
    names = list(dict.fromkeys(n for batch in batches for n in batch))
    if not names:
        return []
    graph = dependency_graph(names, catalog) if chosen is None else chosen_graph(names, chosen)

    batch_of = {}
    for index, batch in enumerate(batches):
        for name in batch:
            batch_of.setdefault(name, index)

    first_base_batch: dict[str, int] = {}
    for index, batch in enumerate(batches):
        for name in batch:
            first_base_batch.setdefault(catalog.base_of(name), index)

    issues = []
    for name in names:
        base = catalog.base_of(name)
        kept = first_base_batch[base]
        if batch_of[name] == kept:
            continue
        for dep in graph[name]:
            dep_batch = first_base_batch[catalog.base_of(dep)]
            if catalog.base_of(dep) != base and dep_batch >= kept:
                issues.append({
                    "base": base,
                    "package": name,
                    "dependency": dep,
                    "kept_batch": kept,
                    "dependency_batch": dep_batch,
                })
    return issues


def plan_build_order(
    batches: list[list[str]],
    catalog: Catalog,
    chosen: dict[str, list[str]] | None = None,
) -> list[list[str]]:
    """Collapse to bases, warning about any base scheduled before a dependency."""
    for issue in find_underordered_bases(batches, catalog, chosen):
        logger.warning(
            "Package base '%s' is built in batch %d, but '%s' needs '%s' from batch %d",
            issue["base"], issue["kept_batch"], issue["package"],
            issue["dependency"], issue["dependency_batch"],
        )
    return collapse_to_bases(batches, catalog)
