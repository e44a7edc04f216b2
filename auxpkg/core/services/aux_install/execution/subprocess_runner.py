"""
L4 Execution — Core subprocess runner.

The SINGLE PLACE where ``subprocess.run`` is called for clone, build
and install operations. Logging and error handling are centralised here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

_TAIL = 2000


def _tail(text: str | None) -> str:
    return text[-_TAIL:] if text else ""


def run_command(
    cmd: list[str],
    *,
    needs_sudo: bool = False,
    timeout: int | None = 120,
    env_overrides: dict[str, str] | None = None,
    cwd: str | None = None,
) -> dict[str, Any]:
    """Run a command and report the outcome as a dict.

    Sudo is only prepended when the command needs root and the process
    is not already root; sudo prompts on the terminal itself.

    Args:
        cmd: Command list for ``subprocess.run()``.
        needs_sudo: Whether the command requires root.
        timeout: Seconds before giving up; ``None`` waits forever.
        env_overrides: Extra env vars.
        cwd: Working directory for the command.

    Returns:
        ``{"ok": True, "stdout": "...", "elapsed_ms": N}`` on success,
        ``{"ok": False, "error": "...", ...}`` on failure.
    """
    # ── Sudo handling ──
    if needs_sudo and os.geteuid() != 0:
        if not shutil.which("sudo"):
            return {
                "ok": False,
                "error": f"'{cmd[0]}' requires root and sudo is not installed",
            }
        cmd = ["sudo", *cmd]

    # ── Environment ──
    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    # ── Execute ──
    logger.debug("Running %s (cwd=%s)", cmd, cwd or ".")
    start = time.monotonic()
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
            cwd=cwd,
        )
    except subprocess.TimeoutExpired:
        return {"ok": False, "error": f"Command timed out ({timeout}s)"}
    except OSError as e:
        logger.error("Could not run %s: %s", cmd, e)
        return {"ok": False, "error": str(e)}

    elapsed_ms = int((time.monotonic() - start) * 1000)
    if result.returncode == 0:
        return {
            "ok": True,
            "stdout": _tail(result.stdout),
            "elapsed_ms": elapsed_ms,
        }

    return {
        "ok": False,
        "error": f"Command failed (exit {result.returncode})",
        "returncode": result.returncode,
        "stderr": _tail(result.stderr),
        "stdout": _tail(result.stdout),
        "elapsed_ms": elapsed_ms,
    }
