"""
Mode orchestrator.

Sequences the storage, compute and routing adapters for a vacation or work
transition. Steps run strictly in order; the calls inside a step touch
distinct resources and run concurrently. The first failing step aborts the
transition without undoing the steps before it.

If the transition is cancelled (Ctrl-C), calls already sent for the current
step are left to finish so the reported result matches cloud state.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Sequence, Tuple

import structlog

from holiday.aws.compute import ComputeAdapter
from holiday.aws.routing import RoutingAdapter
from holiday.aws.storage import StorageAdapter
from holiday.config.holiday import HolidayConfiguration
from holiday.core.errors import (
    ComputeError,
    HolidayError,
    TransitionError,
    TransitionInterruptedError,
)
from holiday.models import Mode, Outcome, RouteTarget
from holiday.orchestration.results import TransitionResult
from holiday.pages import generate_holiday_html

logger = structlog.get_logger()

Call = Tuple[str, Awaitable[Outcome]]


class HolidayOrchestrator:
    """Flips the fleet between vacation and work mode."""

    def __init__(
        self,
        config: HolidayConfiguration,
        storage: StorageAdapter,
        compute: ComputeAdapter,
        routing: RoutingAdapter,
        *,
        html_factory: Callable[[], str] = generate_holiday_html,
        disable_hosting_on_work: bool = True,
        service_timeout: float = 300,
        service_interval: float = 10,
    ) -> None:
        self.config = config
        self.storage = storage
        self.compute = compute
        self.routing = routing
        self._html_factory = html_factory
        self._disable_hosting_on_work = disable_hosting_on_work
        self._service_timeout = service_timeout
        self._service_interval = service_interval

    async def run(self, mode: Mode) -> TransitionResult:
        if mode is Mode.VACATION:
            return await self.enter_vacation()
        return await self.enter_work()

    async def is_satisfied(self, mode: Mode) -> bool:
        """Whether the fleet's compute state already matches ``mode``."""
        return await self.compute.is_in_mode(self.config.services, mode)

    async def enter_vacation(self) -> TransitionResult:
        """Serve static pages from S3 and stop every managed service.

        Traffic is moved off compute before compute is stopped.
        """
        with structlog.contextvars.bound_contextvars(mode=Mode.VACATION.value):
            result = TransitionResult(mode=Mode.VACATION)
            started = time.monotonic()

            if await self._check_state(result):
                return self._finish(result, started)

            html = self._html_factory()
            await self._run_step(
                result,
                "upload_pages",
                "upload",
                [(d, self.storage.upload(d, html)) for d in self.config.active_domains],
            )
            await self._run_step(
                result,
                "enable_static_hosting",
                "enable_static_hosting",
                [(self.storage.bucket, self.storage.enable_static_hosting())],
            )
            await self._run_step(
                result,
                "route_to_storage",
                "route_to",
                [
                    (d, self.routing.route_to(d, RouteTarget.STORAGE))
                    for d in self.config.active_domains
                ],
            )
            await self._run_step(
                result,
                "stop_services",
                "scale_to",
                [(s, self.compute.scale_to(s, 0)) for s in self.config.services],
            )
            return self._finish(result, started)

    async def enter_work(self) -> TransitionResult:
        """Start every managed service, wait for its tasks, then route traffic back to it."""
        with structlog.contextvars.bound_contextvars(mode=Mode.WORK.value):
            result = TransitionResult(mode=Mode.WORK)
            started = time.monotonic()

            if await self._check_state(result):
                return self._finish(result, started)

            await self._run_step(
                result,
                "start_services",
                "scale_to",
                [
                    (s, self.compute.scale_to(s, self.config.steady_state_count(s)))
                    for s in self.config.services
                ],
            )
            await self._run_step(
                result,
                "wait_for_services",
                "wait_for_mode",
                [(",".join(self.config.services), self._wait_for_services())],
                settle=False,
            )
            await self._run_step(
                result,
                "route_to_compute",
                "route_to",
                [
                    (d, self.routing.route_to(d, RouteTarget.COMPUTE))
                    for d in self.config.active_domains
                ],
            )
            if self._disable_hosting_on_work:
                # Routing no longer points at the bucket, so this one may fail
                await self._run_step(
                    result,
                    "disable_static_hosting",
                    "disable_static_hosting",
                    [(self.storage.bucket, self.storage.disable_static_hosting())],
                    fatal=False,
                )
            return self._finish(result, started)

    async def _wait_for_services(self) -> Outcome:
        """Hold routing back until every service runs its desired task count."""
        services = self.config.services
        if not services:
            return Outcome.SKIPPED
        if await self.compute.wait_for_mode(
            services,
            Mode.WORK,
            timeout=self._service_timeout,
            interval=self._service_interval,
        ):
            return Outcome.VERIFIED
        raise ComputeError(
            f"Services did not reach their running task count within {self._service_timeout}s",
            {"services": ",".join(services), "timeout": self._service_timeout},
        )

    async def _check_state(self, result: TransitionResult) -> bool:
        resource = ",".join(self.config.services)
        try:
            satisfied = await self.is_satisfied(result.mode)
        except HolidayError as exc:
            result.record("check_state", "check_state", resource, Outcome.FAILED, str(exc))
            raise TransitionError(
                f"Could not read current service state before entering {result.mode.value}",
                step="check_state",
                resource=resource,
                result=result,
            ) from exc
        except asyncio.CancelledError:
            result.record("check_state", "check_state", resource, Outcome.FAILED, "interrupted")
            raise TransitionInterruptedError(
                f"Entering {result.mode.value} mode was interrupted before any change",
                step="check_state",
                resource=resource,
                result=result,
            ) from None

        if satisfied:
            result.already_in_state = True
            logger.info("transition_already_in_state")
        return satisfied

    def _record_outcomes(
        self,
        result: TransitionResult,
        step: str,
        operation: str,
        calls: Sequence[Call],
        outcomes: Sequence[Any],
    ) -> tuple[str, BaseException] | None:
        """Record every call's outcome and return the first failure, if any."""
        failure: tuple[str, BaseException] | None = None
        for (resource, _), outcome in zip(calls, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                result.record(step, operation, resource, Outcome.FAILED, str(outcome))
                if failure is None:
                    failure = (resource, outcome)
            else:
                result.record(step, operation, resource, outcome)
        return failure

    async def _run_step(
        self,
        result: TransitionResult,
        step: str,
        operation: str,
        calls: Sequence[Call],
        *,
        fatal: bool = True,
        settle: bool = True,
    ) -> None:
        """Run one step's calls concurrently and wait for all of them to settle.

        With ``settle`` (every step that changes cloud state) a cancellation
        waits for the calls already in flight before it is reported. Read-only
        steps such as polling are cancelled outright.
        """
        resources = [r for r, _ in calls]
        logger.info("transition_step_started", step=step, resources=resources)
        gathered = asyncio.gather(*(call for _, call in calls), return_exceptions=True)

        try:
            outcomes: list[Any] = await (asyncio.shield(gathered) if settle else gathered)
        except asyncio.CancelledError:
            if settle:
                outcomes = await gathered
                self._record_outcomes(result, step, operation, calls, outcomes)
            else:
                for resource in resources:
                    result.record(step, operation, resource, Outcome.FAILED, "interrupted")
            logger.warning("transition_step_interrupted", step=step, resources=resources)
            raise TransitionInterruptedError(
                f"Entering {result.mode.value} mode was interrupted during step {step}",
                step=step,
                resource=",".join(resources),
                result=result,
            ) from None

        failure = self._record_outcomes(result, step, operation, calls, outcomes)
        if failure is None:
            logger.info("transition_step_completed", step=step)
            return

        resource, exc = failure
        if not fatal:
            logger.warning("transition_step_failed_ignored", step=step, resource=resource, error=str(exc))
            return

        logger.error("transition_step_failed", step=step, resource=resource, error=str(exc))
        raise TransitionError(
            f"Entering {result.mode.value} mode failed at step {step} for {resource}",
            step=step,
            resource=resource,
            result=result,
        ) from exc

    def _finish(self, result: TransitionResult, started: float) -> TransitionResult:
        result.duration_seconds = time.monotonic() - started
        logger.info(
            "transition_completed",
            already_in_state=result.already_in_state,
            performed=len(result.performed),
            skipped=len(result.skipped),
            failed=len(result.failed),
        )
        return result
