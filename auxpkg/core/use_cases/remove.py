"""
Remove use case — uninstall packages with apt.

Only the system index is consulted: names that are not installed are
reported and skipped, the rest go to apt-get in one transaction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from auxpkg.adapters.registry import AdapterRegistry
from auxpkg.core.config.loader import ConfigError, load_settings
from auxpkg.core.models import Action, Receipt, Settings
from auxpkg.core.services.aux_install.catalog import SystemIndex, load_system_index
from auxpkg.core.services.aux_install.orchestration import build_registry

logger = logging.getLogger(__name__)


@dataclass
class RemoveResult:
    """Result of a remove run."""

    removed: list[str] = field(default_factory=list)
    not_installed: list[str] = field(default_factory=list)
    receipt: Receipt | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and (self.receipt is None or self.receipt.ok)

    def to_dict(self) -> dict:
        result: dict = {"ok": self.ok}
        if self.error:
            result["error"] = self.error
        result["removed"] = self.removed
        result["not_installed"] = self.not_installed
        if self.receipt:
            result["receipt"] = self.receipt.model_dump()
        return result


def run_remove(
    names: list[str],
    *,
    purge: bool = False,
    autoremove: bool = False,
    config_path: Path | None = None,
    mock_mode: bool = False,
    settings: Settings | None = None,
    system: SystemIndex | None = None,
    registry: AdapterRegistry | None = None,
) -> RemoveResult:
    """Remove the installed packages among ``names``.

    Args:
        names: Package names to remove.
        purge: Also delete their configuration files.
        autoremove: Also remove packages no longer needed by anything.
    """
    result = RemoveResult()
    try:
        if settings is None:
            settings = load_settings(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    if system is None:
        system = load_system_index(settings.dpkg_status, settings.apt_lists_dir)

    for name in dict.fromkeys(names):
        if system.installed(name) is None:
            logger.warning("Package '%s' isn't installed, so not removing", name)
            result.not_installed.append(name)
        else:
            result.removed.append(name)

    if not result.removed and not autoremove:
        result.error = "Nothing to remove."
        return result

    if registry is None:
        registry = build_registry(mock_mode=mock_mode)

    result.receipt = registry.execute_action(Action(
        id="system:remove",
        adapter="apt",
        target="system",
        params={
            "operation": "remove",
            "packages": result.removed,
            "purge": purge,
            "autoremove": autoremove,
        },
    ))
    if result.receipt.failed:
        result.error = result.receipt.error
    return result
