"""Orchestration package: vacation/work mode transitions."""

from holiday.orchestration.engine import HolidayOrchestrator
from holiday.orchestration.results import StepResult, TransitionResult

__all__ = [
    "HolidayOrchestrator",
    "StepResult",
    "TransitionResult",
]
