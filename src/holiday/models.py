from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Mode(str, Enum):
    """Desired global state of the fleet."""

    VACATION = "vacation"
    WORK = "work"


class RouteTarget(str, Enum):
    """Where a domain's listener rule sends traffic."""

    STORAGE = "storage"
    COMPUTE = "compute"


class Outcome(str, Enum):
    PERFORMED = "performed"
    SKIPPED = "skipped"
    # Read-only check that passed, such as waiting for tasks to run
    VERIFIED = "verified"
    FAILED = "failed"


@dataclass(frozen=True)
class ServiceState:
    """Task counts reported by ECS for one service."""

    name: str
    cluster: str
    desired_count: int
    running_count: int
    pending_count: int = 0
    status: str = "ACTIVE"

    @property
    def is_running(self) -> bool:
        return self.desired_count > 0 and self.running_count == self.desired_count

    @property
    def is_stopped(self) -> bool:
        return self.desired_count == 0
