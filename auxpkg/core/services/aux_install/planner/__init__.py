"""
L2 Planner — ``__init__.py`` re-exports ordering functions.

Pure functions over a Catalog. No subprocess, no filesystem.
"""

from auxpkg.core.services.aux_install.planner.install_order import (  # noqa: F401
    chosen_graph,
    dependency_graph,
    order_packages,
)
from auxpkg.core.services.aux_install.planner.pkgbase import (  # noqa: F401
    PackageBase,
    collapse_to_bases,
    find_underordered_bases,
    plan_build_order,
)
