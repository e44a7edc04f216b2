"""
Settings model — user configuration for auxpkg.

Loaded from ``config.yml`` and the environment by
``auxpkg.core.config.loader``; every field has a working default.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MPR_URL = "https://mpr.makedeb.org"


def default_cache_dir() -> str:
    base = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return str(Path(base) / "auxpkg")


class Settings(BaseModel):
    """Effective configuration of one auxpkg run."""

    model_config = ConfigDict(extra="forbid")

    mpr_url: str = DEFAULT_MPR_URL
    recursion_limit: int = Field(default=50, ge=1)
    cache_dir: str = Field(default_factory=default_cache_dir)
    archive_max_age: int = Field(default=300, ge=0)   # seconds

    # Overrides of the detected system
    distro: str | None = None
    arch: str | None = None

    dpkg_status: str = "/var/lib/dpkg/status"
    apt_lists_dir: str = "/var/lib/apt/lists"

    build_command: list[str] = Field(default_factory=lambda: ["makedeb", "-s", "--no-confirm"])
    git_branch: str = "master"

    @field_validator("mpr_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://", "file://")):
            raise ValueError(f"mpr_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("build_command")
    @classmethod
    def _non_empty_command(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("build_command must not be empty")
        return v

    @property
    def git_dir(self) -> Path:
        """Directory holding one checkout per package base."""
        return Path(self.cache_dir) / "git-pkg"

    def base_url(self, base: str) -> str:
        """Git remote of a package base."""
        return f"{self.mpr_url}/{base}"
