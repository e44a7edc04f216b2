"""
Clone use case — check out a package base for local work.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from auxpkg.adapters.registry import AdapterRegistry
from auxpkg.core.config.loader import ConfigError, load_settings
from auxpkg.core.models import Action, Receipt, Settings
from auxpkg.core.services.aux_install.catalog import Catalog, CatalogError
from auxpkg.core.services.aux_install.orchestration import build_catalog, build_registry

logger = logging.getLogger(__name__)


@dataclass
class CloneResult:
    """Result of cloning one package base."""

    base: str = ""
    path: str | None = None
    receipt: Receipt | None = None
    hint: str | None = None     # base that builds the requested package name
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.receipt is not None and self.receipt.ok

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok, "base": self.base}
        if self.error:
            result["error"] = self.error
            if self.hint:
                result["hint"] = self.hint
            return result
        result["path"] = self.path
        return result


def run_clone(
    base: str,
    *,
    dest: Path | None = None,
    config_path: Path | None = None,
    mock_mode: bool = False,
    refresh: bool = False,
    settings: Settings | None = None,
    catalog: Catalog | None = None,
    registry: AdapterRegistry | None = None,
) -> CloneResult:
    """Clone ``base`` from the auxiliary repository into ``dest``.

    Args:
        base: Package base name.
        dest: Target directory (default: ``./<base>``).

    Returns:
        CloneResult; when ``base`` is a package built by another base,
        ``hint`` names that base.
    """
    result = CloneResult(base=base)
    try:
        if settings is None:
            settings = load_settings(config_path)
        if catalog is None:
            catalog = build_catalog(settings, refresh=refresh)
    except (ConfigError, CatalogError) as e:
        result.error = str(e)
        return result

    if base not in catalog.bases():
        result.error = f"Package base '{base}' doesn't exist in the auxiliary repository."
        if catalog.has_aux(base):
            result.hint = catalog.base_of(base)
        return result

    path = Path(dest) if dest is not None else Path.cwd() / base
    if path.exists():
        result.error = f"'{path}' already exists."
        return result
    result.path = str(path)

    if registry is None:
        registry = build_registry(mock_mode=mock_mode)

    result.receipt = registry.execute_action(
        Action(
            id=f"clone:{base}",
            adapter="git",
            target=base,
            params={"operation": "clone", "url": settings.base_url(base), "path": str(path)},
        ),
        work_dir=str(path.parent),
    )
    if result.receipt.failed:
        result.error = result.receipt.error
        logger.error("Clone of %s failed: %s", base, result.error)
    return result
