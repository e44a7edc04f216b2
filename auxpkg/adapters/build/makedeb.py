"""
makedeb adapter — build a package base into ``.deb`` artifacts.

Runs the configured build command inside the checkout and reports the
``.deb`` files the build produced in ``metadata["artifacts"]``.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from auxpkg.adapters.base import Adapter, ExecutionContext, command_detail
from auxpkg.core.models.action import Receipt
from auxpkg.core.services.aux_install.execution import run_command

logger = logging.getLogger(__name__)

DEFAULT_BUILD_COMMAND = ["makedeb", "-s", "--no-confirm"]


def _deb_mtimes(path: Path) -> dict[Path, float]:
    return {deb: deb.stat().st_mtime for deb in path.glob("*.deb")}


class MakedebAdapter(Adapter):
    """Build a package base.

    Action params:
        path (str): Checkout directory containing the PKGBUILD.
        command (list[str]): Build command (default: makedeb -s --no-confirm).
        timeout (int | None): Timeout in seconds (default: no limit).
    """

    @property
    def name(self) -> str:
        return "makedeb"

    def is_available(self) -> bool:
        return shutil.which("makedeb") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        path = context.action.params.get("path", "")
        if not path:
            return False, "Missing required param: 'path'"
        if not Path(path).is_dir():
            return False, f"Build directory '{path}' does not exist"
        command = context.action.params.get("command", DEFAULT_BUILD_COMMAND)
        if not command:
            return False, "Build command is empty"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        path = Path(params["path"])
        command = list(params.get("command") or DEFAULT_BUILD_COMMAND)

        before = _deb_mtimes(path)
        logger.info("Building %s with %s", path.name, " ".join(command))
        r = run_command(command, cwd=str(path), timeout=params.get("timeout"))
        if not r["ok"]:
            return self.failed(
                context, f"Build of '{path.name}' failed: {command_detail(r)}", command=command,
            )

        after = _deb_mtimes(path)
        artifacts = sorted(
            str(deb.resolve()) for deb, mtime in after.items()
            if before.get(deb) != mtime
        )
        if not artifacts:
            return self.failed(
                context, f"Build of '{path.name}' produced no .deb files", command=command,
            )

        return Receipt.success(
            adapter=self.name,
            action_id=context.action.id,
            output=r.get("stdout", ""),
            metadata={"command": command, "artifacts": artifacts},
        )
