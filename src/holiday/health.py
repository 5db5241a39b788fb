"""
HTTP checks run after a transition.

Work mode expects ``/health`` on every active domain to answer 200; vacation
mode expects the domains to redirect (301/302) to the holiday bucket; a
redirect anywhere else counts as a failure.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Iterable

import httpx
import structlog

from holiday.models import Mode

logger = structlog.get_logger()

REDIRECT_CODES = (301, 302)


@dataclass(frozen=True)
class HealthCheckResult:
    url: str
    status_code: int | None = None
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status_code == 200


@dataclass(frozen=True)
class RedirectCheckResult:
    url: str
    status_code: int | None = None
    location: str | None = None
    to_storage: bool = False
    error: str | None = None

    @property
    def redirected(self) -> bool:
        return self.status_code is not None and 300 <= self.status_code < 400


def mode_urls(mode: Mode, domains: Iterable[str]) -> list[str]:
    if mode is Mode.WORK:
        return [f"https://{domain}/health" for domain in domains]
    return [f"https://{domain}" for domain in domains]


class EndpointChecker:
    """Probes public endpoints without following redirects."""

    def __init__(self, *, storage_host: str, timeout: float = 10.0) -> None:
        self.storage_host = storage_host
        self.timeout = timeout

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=False)

    async def check_health(self, url: str, client: httpx.AsyncClient | None = None) -> HealthCheckResult:
        try:
            if client is None:
                async with self._client() as own:
                    response = await own.get(url)
            else:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            return HealthCheckResult(url=url, error=str(exc) or type(exc).__name__)
        return HealthCheckResult(url=url, status_code=response.status_code)

    async def check_redirect(
        self, url: str, client: httpx.AsyncClient | None = None
    ) -> RedirectCheckResult:
        try:
            if client is None:
                async with self._client() as own:
                    response = await own.head(url)
            else:
                response = await client.head(url)
        except httpx.HTTPError as exc:
            return RedirectCheckResult(url=url, error=str(exc) or type(exc).__name__)

        location = response.headers.get("location")
        return RedirectCheckResult(
            url=url,
            status_code=response.status_code,
            location=location,
            to_storage=bool(location) and self.storage_host in location,
        )

    async def matches_mode(self, mode: Mode, domains: Iterable[str]) -> bool:
        """One round of checks: every endpoint answers as ``mode`` expects."""
        urls = mode_urls(mode, domains)
        async with self._client() as client:
            if mode is Mode.WORK:
                health = await asyncio.gather(*(self.check_health(u, client) for u in urls))
                for result in health:
                    logger.info("endpoint_health", url=result.url, status=result.status_code, error=result.error)
                return all(r.healthy for r in health)

            redirects = await asyncio.gather(*(self.check_redirect(u, client) for u in urls))
            for result in redirects:
                logger.info(
                    "endpoint_redirect",
                    url=result.url,
                    status=result.status_code,
                    location=result.location,
                    error=result.error,
                )
            return all(r.status_code in REDIRECT_CODES and r.to_storage for r in redirects)

    async def wait_for_mode(
        self,
        mode: Mode,
        domains: Iterable[str],
        *,
        timeout: float = 300,
        interval: float = 5,
    ) -> bool:
        """Poll until every endpoint answers as ``mode`` expects or time runs out."""
        names = list(domains)
        deadline = time.monotonic() + timeout
        while True:
            if await self.matches_mode(mode, names):
                logger.info("endpoints_ready", mode=mode.value)
                return True
            if time.monotonic() >= deadline:
                logger.warning("endpoints_timeout", mode=mode.value, timeout=timeout)
                return False
            await asyncio.sleep(interval)
