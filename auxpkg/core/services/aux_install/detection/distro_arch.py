"""
L3 Detection — Active distro codename and architecture.

Read-only probes. Either component may come back as ``None`` when it
cannot be determined; the specificity lookup then skips keys that
need it.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from auxpkg.core.models import DistroArch

logger = logging.getLogger(__name__)

OS_RELEASE = Path("/etc/os-release")


def _read_os_release(path: Path = OS_RELEASE) -> dict[str, str]:
    """Parse ``KEY=value`` lines of an os-release file."""
    fields: dict[str, str] = {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return fields
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = value.strip().strip("\"'")
    return fields


def detect_distro(path: Path = OS_RELEASE) -> str | None:
    """Distro codename (``VERSION_CODENAME``), e.g. ``jammy``."""
    return _read_os_release(path).get("VERSION_CODENAME") or None


def detect_arch() -> str | None:
    """Debian architecture name as reported by dpkg, e.g. ``amd64``."""
    if not shutil.which("dpkg"):
        logger.debug("dpkg not found; architecture unknown")
        return None
    try:
        r = subprocess.run(
            ["dpkg", "--print-architecture"],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("dpkg --print-architecture failed: %s", e)
        return None
    if r.returncode != 0:
        return None
    return r.stdout.strip() or None


def current_distro_arch(
    distro: str | None = None,
    arch: str | None = None,
) -> DistroArch:
    """Return the active ``(distro, arch)``; explicit overrides win."""
    result = DistroArch(
        distro=distro or detect_distro(),
        arch=arch or detect_arch(),
    )
    logger.debug("Active distro/arch: %s/%s", result.distro or "*", result.arch or "*")
    return result
