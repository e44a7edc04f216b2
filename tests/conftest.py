"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from auxpkg.core.services.aux_install.catalog import Catalog
from tests.helpers import aux, make_catalog


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Strip AUXPKG_* variables and point XDG dirs into tmp_path."""
    for var in (
        "AUXPKG_CONFIG", "AUXPKG_MPR_URL", "MPR_URL", "AUXPKG_RECURSION_LIMIT",
        "AUXPKG_CACHE_DIR", "AUXPKG_DISTRO", "AUXPKG_ARCH",
        "AUXPKG_LOG_LEVEL", "AUXPKG_LOG_FILE", "AUXPKG_LOG_FILE_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    return tmp_path


@pytest.fixture
def chain_catalog() -> Catalog:
    """A -> B -> C, all auxiliary."""
    return make_catalog([
        aux("A", depends=["B"]),
        aux("B", depends=["C"]),
        aux("C"),
    ])
