"""
L5 Orchestration — ``__init__.py`` re-exports the coordinators.

Imported directly by the use cases; the aux_install package itself
does not pull this layer in, since it depends on the adapters.
"""

from auxpkg.core.services.aux_install.orchestration.orchestrator import (  # noqa: F401
    SOURCE_AUX,
    SOURCE_SYSTEM,
    BuildPlan,
    ExecutionReport,
    build_catalog,
    build_registry,
    classify_requests,
    execute_build_plan,
    plan_install,
    upgrade_candidates,
)
