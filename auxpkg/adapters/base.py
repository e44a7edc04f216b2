"""
Adapter base — contract between orchestration and the external tools.

git, makedeb and apt each sit behind one Adapter. Orchestration builds
Actions, the registry wraps them in an ExecutionContext, and the
adapter answers with a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from auxpkg.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """The action plus where it runs."""

    action: Action
    work_dir: str = "."
    dry_run: bool = False
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def working_dir(self) -> str:
        """The action's ``path`` param when set, else the run's work dir."""
        return self.params.get("path") or self.work_dir


def command_detail(result: dict[str, Any]) -> str:
    """Most useful line of a failed ``run_command`` result: stderr, else the error."""
    return result.get("stderr", "").strip() or result.get("error", "")


class Adapter(ABC):
    """One external tool.

    ``execute`` reports every failure as a ``failed`` Receipt; the
    registry still guards against an adapter that raises.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Name actions use to address this adapter ('git', 'makedeb', 'apt')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the underlying tool is on PATH."""

    @abstractmethod
    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check params before running; ``(ok, problem)``."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the action."""

    def failed(self, context: ExecutionContext, error: str, **metadata: Any) -> Receipt:
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=error,
            metadata=metadata,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
