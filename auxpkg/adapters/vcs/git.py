"""
Git adapter — package base checkouts.

Keeps one checkout per package base under the cache directory: clones
it when missing, otherwise switches to the tracked branch and pulls.
Uses the git CLI through the shared subprocess runner.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from auxpkg.adapters.base import Adapter, ExecutionContext, command_detail
from auxpkg.core.models.action import Receipt
from auxpkg.core.services.aux_install.execution import run_command

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Clone or update a package base checkout.

    Action params:
        operation (str): One of 'sync', 'clone', 'update'. 'sync' clones
                         when ``path`` is missing and updates otherwise.
        url (str): Remote to clone from (for 'clone'/'sync').
        path (str): Checkout directory.
        branch (str): Branch to check out before pulling (default: master).
        timeout (int): Timeout in seconds per git call (default: 300).
    """

    VALID_OPS = {"sync", "clone", "update"}

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.action.params
        operation = params.get("operation", "sync")
        if operation not in self.VALID_OPS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(self.VALID_OPS))}"
        if not params.get("path"):
            return False, "Missing required param: 'path'"
        if operation in ("sync", "clone") and not params.get("url"):
            return False, f"Missing required param: 'url' for {operation} operation"

        path = Path(params["path"])
        if path.exists() and not path.is_dir():
            return False, f"'{path}' exists but is not a directory"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.action.params
        operation = params.get("operation", "sync")
        path = Path(params["path"])

        if operation == "sync":
            operation = "update" if path.is_dir() else "clone"

        if operation == "clone":
            return self._clone(context, params["url"], path)
        return self._update(context, path)

    # ── Operations ──────────────────────────────────────────────

    def _clone(self, ctx: ExecutionContext, url: str, path: Path) -> Receipt:
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Cloning %s into %s", url, path)
        r = self._git(["clone", url, str(path)], cwd=str(path.parent), ctx=ctx)
        if not r["ok"]:
            return self._failed(ctx, "clone", r)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=r.get("stdout", ""),
            metadata={"operation": "clone", "path": str(path)},
        )

    def _update(self, ctx: ExecutionContext, path: Path) -> Receipt:
        branch = ctx.action.params.get("branch", "master")
        logger.info("Updating %s (%s)", path, branch)

        r = self._git(["checkout", branch], cwd=str(path), ctx=ctx)
        if not r["ok"]:
            return self._failed(ctx, "checkout", r)
        r = self._git(["pull"], cwd=str(path), ctx=ctx)
        if not r["ok"]:
            return self._failed(ctx, "pull", r)

        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=r.get("stdout", ""),
            metadata={"operation": "update", "path": str(path), "branch": branch},
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], *, cwd: str, ctx: ExecutionContext) -> dict:
        timeout = ctx.action.params.get("timeout", 300)
        return run_command(["git", *args], cwd=cwd, timeout=timeout)

    def _failed(self, ctx: ExecutionContext, step: str, result: dict) -> Receipt:
        return self.failed(ctx, f"git {step} failed: {command_detail(result)}", step=step)
