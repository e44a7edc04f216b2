"""
L2 Resolver — ``__init__.py`` re-exports resolution entry points.

Consults the Catalog only; system-side decisions are recorded in the
InstallationPlan, never applied here.
"""

from auxpkg.core.services.aux_install.resolver.package_resolver import (  # noqa: F401
    DEFAULT_RECURSION_LIMIT,
    PackageResolver,
    resolve,
)
