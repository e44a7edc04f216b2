"""
Configuration loader — reads config.yml and the environment into Settings.

Precedence, highest first: environment variables, the config file,
the model defaults. It reads YAML, validates against the Pydantic
schema, and returns a typed Settings object.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import ValidationError

from auxpkg.core.models.settings import Settings

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"
ENV_CONFIG = "AUXPKG_CONFIG"

# Settings field -> environment variables, first set one wins
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "mpr_url": ("AUXPKG_MPR_URL", "MPR_URL"),
    "recursion_limit": ("AUXPKG_RECURSION_LIMIT",),
    "cache_dir": ("AUXPKG_CACHE_DIR",),
    "distro": ("AUXPKG_DISTRO",),
    "arch": ("AUXPKG_ARCH",),
}


class ConfigError(Exception):
    """Raised when configuration is invalid or an explicit file is missing."""


def default_config_path(env: Mapping[str, str] | None = None) -> Path:
    env = os.environ if env is None else env
    base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "auxpkg" / CONFIG_FILE


def find_config_file(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Path | None, bool]:
    """Locate the config file.

    Returns:
        ``(path, explicit)``. ``explicit`` is True when the path came from
        ``--config`` or ``$AUXPKG_CONFIG`` and therefore must exist. The
        default location is returned as ``None`` when absent.
    """
    env = os.environ if env is None else env
    if path is not None:
        return Path(path), True
    if env.get(ENV_CONFIG):
        return Path(env[ENV_CONFIG]), True
    default = default_config_path(env)
    return (default if default.is_file() else None), False


def _read_yaml(path: Path) -> dict:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _env_values(env: Mapping[str, str]) -> dict[str, str]:
    values = {}
    for field, names in ENV_OVERRIDES.items():
        for name in names:
            if env.get(name):
                values[field] = env[name]
                break
    return values


def load_settings(
    path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Load and validate settings.

    Args:
        path: Explicit config file (``--config``). If None, uses
            ``$AUXPKG_CONFIG`` or the XDG default location.
        env: Environment to read overrides from (default: ``os.environ``).

    Returns:
        Validated Settings.

    Raises:
        ConfigError: If an explicit file is missing, or anything is invalid.
    """
    env = os.environ if env is None else env
    config_path, explicit = find_config_file(path, env)

    data: dict = {}
    if config_path is not None:
        if not config_path.is_file():
            if explicit:
                raise ConfigError(f"Config file not found: {config_path}")
        else:
            logger.debug("Loading config from %s", config_path)
            data = _read_yaml(config_path)

    data.update(_env_values(env))

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        source = config_path or "environment"
        raise ConfigError(f"Invalid configuration ({source}): {e}") from e

    logger.debug("Effective settings: %s", settings.model_dump())
    return settings
