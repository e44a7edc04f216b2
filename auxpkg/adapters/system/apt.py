"""
apt adapter — commit system changes.

Installs marked system packages and built ``.deb`` artifacts with
``apt-get``, then records automatically-installed packages with
``apt-mark auto`` so ``apt autoremove`` can clean them up later.
Also removes installed packages.
"""

from __future__ import annotations

import logging
import shutil

from auxpkg.adapters.base import Adapter, ExecutionContext, command_detail
from auxpkg.core.models.action import Receipt
from auxpkg.core.services.aux_install.execution import run_command

logger = logging.getLogger(__name__)

_NONINTERACTIVE = {"DEBIAN_FRONTEND": "noninteractive"}


def install_command(
    packages: list[str],
    debs: list[str],
    only_upgrade: bool = False,
) -> list[str]:
    """``apt-get install`` command line for names/pins and local .deb paths."""
    cmd = ["apt-get", "install", "-y"]
    if only_upgrade:
        cmd.append("--only-upgrade")
    return [*cmd, "--", *packages, *debs]


def remove_command(
    packages: list[str],
    purge: bool = False,
    autoremove: bool = False,
) -> list[str]:
    """``apt-get remove`` for ``packages``, or a bare autoremove when there are none."""
    if not packages:
        return ["apt-get", "autoremove", "-y", *(["--purge"] if purge else [])]
    cmd = ["apt-get", "remove", "-y"]
    if purge:
        cmd.append("--purge")
    if autoremove:
        cmd.append("--autoremove")
    return [*cmd, "--", *packages]


class AptAdapter(Adapter):
    """Install or remove packages through apt-get.

    Action params:
        operation (str): 'install' (default) or 'remove'.
        packages (list[str]): Index packages, ``name`` or ``name=version``.
        debs (list[str]): Absolute paths of local .deb files (install).
        auto (list[str]): Package names to mark as automatically installed.
        only_upgrade (bool): Leave packages that are not installed alone and
                             keep the manual/auto state of those that are.
        purge (bool): Also delete configuration files (remove).
        autoremove (bool): Also remove packages nothing depends on anymore (remove).
        timeout (int | None): Timeout in seconds (default: no limit).
    """

    VALID_OPS = {"install", "remove"}

    @property
    def name(self) -> str:
        return "apt"

    def is_available(self) -> bool:
        return shutil.which("apt-get") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "install")
        if operation not in self.VALID_OPS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self.VALID_OPS))}"

        if operation == "remove":
            if not params.get("packages") and not params.get("autoremove"):
                return False, "Nothing to remove: 'packages' is empty and 'autoremove' is off"
            return True, ""

        if not params.get("packages") and not params.get("debs"):
            return False, "Nothing to install: 'packages' and 'debs' are both empty"
        bad = [d for d in params.get("debs", []) if not d.startswith("/")]
        if bad:
            return False, f"Local packages must be absolute paths: {', '.join(bad)}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        if context.action.params.get("operation", "install") == "remove":
            return self._remove(context)
        return self._install(context)

    # ── Operations ──────────────────────────────────────────────

    def _install(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        packages = list(params.get("packages", []))
        debs = list(params.get("debs", []))
        auto = list(params.get("auto", []))
        timeout = params.get("timeout")

        cmd = install_command(packages, debs, params.get("only_upgrade", False))
        logger.info("Installing %d package(s) and %d local file(s)", len(packages), len(debs))
        r = run_command(cmd, needs_sudo=True, timeout=timeout, env_overrides=_NONINTERACTIVE)
        if not r["ok"]:
            return self.failed(context, f"apt-get install failed: {command_detail(r)}", command=cmd)

        if auto:
            mark = run_command(["apt-mark", "auto", *auto], needs_sudo=True, timeout=timeout)
            if not mark["ok"]:
                logger.warning("apt-mark auto failed: %s", command_detail(mark))

        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=r.get("stdout", ""),
            metadata={"command": cmd, "auto": auto},
        )

    def _remove(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        packages = list(params.get("packages", []))
        cmd = remove_command(packages, params.get("purge", False), params.get("autoremove", False))

        logger.info("Removing %d package(s)", len(packages))
        r = run_command(
            cmd, needs_sudo=True, timeout=params.get("timeout"), env_overrides=_NONINTERACTIVE,
        )
        if not r["ok"]:
            return self.failed(context, f"{' '.join(cmd[:2])} failed: {command_detail(r)}", command=cmd)

        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=r.get("stdout", ""),
            metadata={"command": cmd},
        )
