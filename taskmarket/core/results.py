"""Outcome of a side effect that may be allowed to fail.

Flows such as checkout write secondary records (transaction log, profile
sync) that must never block what the user sees. Instead of hiding those
failures inside bare try/except blocks, each step reports a SideEffectResult
and the caller decides: SOFT_FAILURE is logged and ignored, HARD_FAILURE
aborts the flow.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    OK = "ok"
    SOFT_FAILURE = "soft_failure"
    HARD_FAILURE = "hard_failure"


@dataclass(frozen=True)
class SideEffectResult:
    step: str
    outcome: Outcome
    data: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @property
    def should_abort(self) -> bool:
        return self.outcome is Outcome.HARD_FAILURE

    @classmethod
    def success(cls, step: str, data: Any = None) -> "SideEffectResult":
        return cls(step=step, outcome=Outcome.OK, data=data)

    @classmethod
    def soft_failure(cls, step: str, error: str) -> "SideEffectResult":
        return cls(step=step, outcome=Outcome.SOFT_FAILURE, error=error)

    @classmethod
    def hard_failure(cls, step: str, error: str) -> "SideEffectResult":
        return cls(step=step, outcome=Outcome.HARD_FAILURE, error=error)

    def as_dict(self) -> dict:
        return {"step": self.step, "outcome": self.outcome.value, "error": self.error}


def best_effort(step: str, action: Callable[[], Any]) -> SideEffectResult:
    """Run action; any exception becomes a logged SOFT_FAILURE."""
    try:
        return SideEffectResult.success(step, action())
    except Exception as e:
        logger.warning(f"{step} failed: {e}")
        return SideEffectResult.soft_failure(step, str(e))
