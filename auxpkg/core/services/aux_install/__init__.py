"""
Auxiliary package install service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate layer (domain → resolver/planner → catalog/detection →
execution → orchestration)::

    from auxpkg.core.services.aux_install import resolve, order_packages

Orchestration is not re-exported here; import it from
``auxpkg.core.services.aux_install.orchestration``.
"""

# ── L1: Domain ──
from auxpkg.core.services.aux_install.domain import (  # noqa: F401
    CyclicDependency,
    RecursionExceeded,
    ResolutionError,
    UnknownPackage,
    UnsatisfiableDependency,
    VersionComparator,
)

# ── L2: Resolver / Planner ──
from auxpkg.core.services.aux_install.planner import (  # noqa: F401
    collapse_to_bases,
    order_packages,
    plan_build_order,
)
from auxpkg.core.services.aux_install.resolver import (  # noqa: F401
    PackageResolver,
    resolve,
)

# ── L3: Catalog / Detection ──
from auxpkg.core.services.aux_install.catalog import (  # noqa: F401
    Catalog,
    CatalogError,
    SystemIndex,
)
from auxpkg.core.services.aux_install.detection import (  # noqa: F401
    current_distro_arch,
)
