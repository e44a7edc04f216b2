"""
Config check use case — validate config.yml and report issues.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from auxpkg.adapters import AptAdapter, GitAdapter
from auxpkg.core.config.loader import ConfigError, find_config_file, load_settings
from auxpkg.core.models import Settings


@dataclass
class ConfigCheckResult:
    """Result of configuration validation."""

    valid: bool = False
    settings: Settings | None = None
    config_path: Path | None = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "config_path": str(self.config_path) if self.config_path else None,
            "errors": self.errors,
            "warnings": self.warnings,
            "settings": self.settings.model_dump() if self.settings else None,
        }


def check_config(config_path: Path | None = None) -> ConfigCheckResult:
    """Validate configuration and report issues.

    Args:
        config_path: Optional explicit path to config.yml.

    Returns:
        ConfigCheckResult with the effective settings and any issues.
    """
    result = ConfigCheckResult()
    result.config_path, _ = find_config_file(config_path)

    try:
        settings = load_settings(config_path)
        result.settings = settings
    except ConfigError as e:
        result.errors.append(str(e))
        return result

    # Environment checks
    if result.config_path is None:
        result.warnings.append("No config file found; using defaults.")

    if not Path(settings.dpkg_status).is_file():
        result.warnings.append(f"dpkg status file not found: {settings.dpkg_status}")

    if not Path(settings.apt_lists_dir).is_dir():
        result.warnings.append(f"apt lists directory not found: {settings.apt_lists_dir}")

    if not shutil.which(settings.build_command[0]):
        result.warnings.append(f"Build tool '{settings.build_command[0]}' is not on PATH.")

    for adapter, consequence in (
        (GitAdapter(), "package bases cannot be cloned"),
        (AptAdapter(), "nothing can be installed"),
    ):
        if not adapter.is_available():
            result.warnings.append(f"{adapter.name} is not available; {consequence}.")

    result.valid = len(result.errors) == 0
    return result
