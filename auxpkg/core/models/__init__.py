"""
Domain models — Pydantic types for auxpkg.

All models are re-exported here for convenient access:

    from auxpkg.core.models import PackageRecord, InstallationPlan, Receipt
"""

from auxpkg.core.models.action import Action, Receipt
from auxpkg.core.models.package import (
    DependencyTable,
    DistroArch,
    DistroArchKey,
    GENERIC_KEY,
    KeyKind,
    Origin,
    PackageRecord,
    VersionRef,
    specificity_keys,
)
from auxpkg.core.models.plan import InstallationPlan, ResolutionResult, SystemMark
from auxpkg.core.models.settings import Settings

__all__ = [
    # action.py
    "Action",
    # package.py
    "DependencyTable",
    "DistroArch",
    "DistroArchKey",
    "GENERIC_KEY",
    # plan.py
    "InstallationPlan",
    "KeyKind",
    "Origin",
    "PackageRecord",
    "Receipt",
    "ResolutionResult",
    "Settings",
    "SystemMark",
    "VersionRef",
    "specificity_keys",
]
