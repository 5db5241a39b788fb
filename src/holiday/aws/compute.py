"""
ECS operations for holiday mode.

Reads desired/running task counts and scales services between zero and their
steady-state count. A service that does not exist counts as stopped.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Iterable

import structlog

from holiday.aws.base import AWS_ERRORS, is_not_found
from holiday.core.errors import ComputeError, ServiceNotFoundError
from holiday.models import Mode, Outcome, ServiceState

logger = structlog.get_logger()

SERVICE_SUFFIX = "-service"
CLUSTER_SUFFIX = "-cluster"
NOT_FOUND_CODES = ("ServiceNotFoundException", "ClusterNotFoundException")


def cluster_for(service: str) -> str:
    """Derive the ECS cluster name from a service name.

    >>> cluster_for("bazaar-service")
    'bazaar-cluster'
    >>> cluster_for("bazaar")
    'bazaar-cluster'
    """
    base = service[: -len(SERVICE_SUFFIX)] if service.endswith(SERVICE_SUFFIX) else service
    return f"{base}{CLUSTER_SUFFIX}"


class ComputeAdapter:
    """Service lifecycle operations against ECS."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def cluster_for(self, service: str) -> str:
        return cluster_for(service)

    async def describe(self, service: str) -> ServiceState | None:
        """Current task counts for a service, or None if it does not exist."""
        cluster = self.cluster_for(service)
        try:
            response = await self._client.describe_services(cluster=cluster, services=[service])
        except AWS_ERRORS as exc:
            if is_not_found(exc, *NOT_FOUND_CODES):
                return None
            raise ComputeError(
                f"Failed to describe service {service}",
                {"operation": "describe_services", "service": service, "cluster": cluster},
            ) from exc

        services = response.get("services") or []
        if not services:
            return None

        raw = services[0]
        status = raw.get("status", "ACTIVE")
        if status == "INACTIVE":
            return None

        return ServiceState(
            name=service,
            cluster=cluster,
            desired_count=int(raw.get("desiredCount", 0)),
            running_count=int(raw.get("runningCount", 0)),
            pending_count=int(raw.get("pendingCount", 0)),
            status=status,
        )

    async def describe_all(self, services: Iterable[str]) -> dict[str, ServiceState | None]:
        names = list(services)
        states = await asyncio.gather(*(self.describe(name) for name in names))
        return dict(zip(names, states, strict=True))

    async def are_services_running(self, services: Iterable[str]) -> bool:
        """True when every service exists and runs all of its desired tasks."""
        states = await self.describe_all(services)
        if not states:
            return False
        return all(state is not None and state.is_running for state in states.values())

    async def are_services_stopped(self, services: Iterable[str]) -> bool:
        """True when every service is missing or has zero desired tasks."""
        states = await self.describe_all(services)
        return all(state is None or state.is_stopped for state in states.values())

    async def is_in_mode(self, services: Iterable[str], mode: Mode) -> bool:
        if mode is Mode.VACATION:
            return await self.are_services_stopped(services)
        return await self.are_services_running(services)

    async def scale_to(self, service: str, desired_count: int) -> Outcome:
        """Set the desired task count; already at that count is a no-op."""
        cluster = self.cluster_for(service)
        state = await self.describe(service)

        if state is None:
            if desired_count == 0:
                logger.info("compute_scale_skipped", service=service, reason="not_found")
                return Outcome.SKIPPED
            raise ServiceNotFoundError(
                f"Cannot start service {service}: it does not exist",
                {"service": service, "cluster": cluster},
            )

        if state.desired_count == desired_count:
            logger.info("compute_scale_skipped", service=service, desired=desired_count)
            return Outcome.SKIPPED

        try:
            await self._client.update_service(
                cluster=cluster, service=service, desiredCount=desired_count
            )
        except AWS_ERRORS as exc:
            if is_not_found(exc, *NOT_FOUND_CODES):
                if desired_count == 0:
                    logger.info("compute_scale_skipped", service=service, reason="not_found")
                    return Outcome.SKIPPED
                raise ServiceNotFoundError(
                    f"Cannot start service {service}: it does not exist",
                    {"service": service, "cluster": cluster},
                ) from exc
            raise ComputeError(
                f"Failed to scale service {service} to {desired_count}",
                {"operation": "update_service", "service": service, "cluster": cluster},
            ) from exc

        logger.info(
            "compute_scaled",
            service=service,
            cluster=cluster,
            previous=state.desired_count,
            desired=desired_count,
        )
        return Outcome.PERFORMED

    async def wait_for_mode(
        self,
        services: Iterable[str],
        mode: Mode,
        *,
        timeout: float = 300,
        interval: float = 10,
    ) -> bool:
        """Poll ECS until the services match the mode or the timeout elapses."""
        names = list(services)
        deadline = time.monotonic() + timeout

        while True:
            try:
                if await self.is_in_mode(names, mode):
                    logger.info("compute_mode_reached", mode=mode.value, services=names)
                    return True
            except ComputeError as exc:
                # Polling is read-only, so a failed describe is retried
                logger.warning("compute_mode_check_failed", error=str(exc.__cause__ or exc))

            if time.monotonic() >= deadline:
                logger.warning("compute_mode_timeout", mode=mode.value, timeout=timeout)
                return False
            logger.info("compute_mode_pending", mode=mode.value)
            await asyncio.sleep(interval)
