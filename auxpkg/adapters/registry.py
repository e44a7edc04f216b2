"""
Adapter registry — dispatch of clone, build and install actions.

Orchestration hands every Action to the registry, which picks the
adapter named by ``action.adapter`` (or the mock in mock mode),
validates, and runs it. Whatever happens, a Receipt comes back.
"""

from __future__ import annotations

import logging
import time

from auxpkg.adapters.base import Adapter, ExecutionContext
from auxpkg.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters by name, plus an optional mock that stands in for all of them."""

    def __init__(self, mock_mode: bool = False):
        self._adapters: dict[str, Adapter] = {}
        self._mock_mode = mock_mode
        self._mock_adapter: Adapter | None = None

    @property
    def mock_mode(self) -> bool:
        return self._mock_mode

    def set_mock_mode(self, enabled: bool, mock_adapter: Adapter | None = None) -> None:
        """Route every action to ``mock_adapter`` (or a canned success when None)."""
        self._mock_mode = enabled
        self._mock_adapter = mock_adapter

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter '%s'", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Registered adapter: %s", adapter.name)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def list_adapters(self) -> list[str]:
        return list(self._adapters)

    # ── Dispatch ────────────────────────────────────────────────

    def _adapter_for(self, action: Action) -> Adapter | None:
        if self._mock_mode:
            return self._mock_adapter
        return self._adapters.get(action.adapter)

    def execute_action(
        self,
        action: Action,
        work_dir: str = ".",
        dry_run: bool = False,
    ) -> Receipt:
        """Validate and run ``action``; never raises.

        In dry-run mode a valid action is skipped instead of executed.
        """
        started = time.monotonic()
        logger.debug("Dispatching %s via %s", action.id, action.adapter)

        if self._mock_mode and self._mock_adapter is None:
            return Receipt.success(
                adapter=action.adapter,
                action_id=action.id,
                output=f"[mock] {action.id}",
                metadata={"mock": True, "dry_run": dry_run},
            )

        adapter = self._adapter_for(action)
        if adapter is None:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"No adapter registered for '{action.adapter}'",
            )

        context = ExecutionContext(
            action=action,
            work_dir=work_dir,
            dry_run=dry_run,
            params=action.params,
        )

        try:
            valid, problem = adapter.validate(context)
        except Exception as e:
            valid, problem = False, f"validator raised {e}"
        if not valid:
            return Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Validation failed: {problem}",
            )

        if dry_run:
            return Receipt.skip(
                adapter=action.adapter,
                action_id=action.id,
                reason=f"[dry-run] {action.id}",
                metadata={"dry_run": True},
            )

        try:
            receipt = adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised on %s: %s", action.adapter, action.id, e)
            receipt = Receipt.failure(
                adapter=action.adapter,
                action_id=action.id,
                error=f"Unexpected error: {e}",
            )

        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        return receipt
