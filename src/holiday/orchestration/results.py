"""Result types for mode transitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from holiday.models import Mode, Outcome


@dataclass(frozen=True)
class StepResult:
    """Outcome of one adapter call within a transition step."""

    step: str
    operation: str
    resource: str
    outcome: Outcome
    error: str | None = None


@dataclass
class TransitionResult:
    """Everything a transition did, in the order it happened."""

    mode: Mode
    already_in_state: bool = False
    steps: List[StepResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    def record(
        self,
        step: str,
        operation: str,
        resource: str,
        outcome: Outcome,
        error: str | None = None,
    ) -> StepResult:
        entry = StepResult(step, operation, resource, outcome, error)
        self.steps.append(entry)
        return entry

    def _with(self, outcome: Outcome) -> List[StepResult]:
        return [s for s in self.steps if s.outcome is outcome]

    @property
    def performed(self) -> List[StepResult]:
        return self._with(Outcome.PERFORMED)

    @property
    def skipped(self) -> List[StepResult]:
        return self._with(Outcome.SKIPPED)

    @property
    def failed(self) -> List[StepResult]:
        return self._with(Outcome.FAILED)

    @property
    def mutated(self) -> bool:
        """Whether any call actually changed cloud state."""
        return bool(self.performed)

    @property
    def success(self) -> bool:
        return not self.failed

    @property
    def last_step(self) -> str | None:
        """The furthest step the transition reached."""
        return self.steps[-1].step if self.steps else None
