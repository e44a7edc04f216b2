"""
Mock adapter — stands in for git, makedeb and apt in mock mode.

Every action succeeds unless a failure or canned receipt was set for
its ID. Build actions report one fake ``.deb`` per package base so the
install steps that follow have artifacts to pass on.
"""

from __future__ import annotations

from auxpkg.adapters.base import Adapter, ExecutionContext
from auxpkg.core.models.action import Receipt


class MockAdapter(Adapter):
    """Records every context it receives; tests read them back via ``call_log``."""

    def __init__(self, adapter_name: str = "mock", output: str = "[mock] done"):
        self._name = adapter_name
        self._output = output
        self._canned: dict[str, Receipt] = {}
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    @property
    def action_ids(self) -> list[str]:
        return [ctx.action.id for ctx in self.call_log]

    def is_available(self) -> bool:
        return True

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._canned[action_id] = receipt

    def set_failure(self, action_id: str, error: str = "Mock failure") -> None:
        self.set_response(action_id, Receipt.failure(adapter=self._name, action_id=action_id, error=error))

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        action = context.action
        if action.id in self._canned:
            return self._canned[action.id]

        metadata: dict = {"mock": True}
        if action.adapter == "makedeb":
            base = action.target or "package"
            metadata["artifacts"] = [f"{context.working_dir}/{base}_mock_all.deb"]
        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=self._output,
            metadata=metadata,
        )

    def reset(self) -> None:
        self.call_log.clear()
        self._canned.clear()
