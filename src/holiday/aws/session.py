from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Any

import aioboto3
import structlog
from botocore.config import Config

from holiday.config.settings import Settings

logger = structlog.get_logger()

SERVICES = ("s3", "ecs", "elbv2", "cloudformation")

# LocalStack accepts any credentials
LOCAL_CREDENTIALS = {"aws_access_key_id": "test", "aws_secret_access_key": "test"}


class AWSContext:
    """Scoped set of AWS clients shared by the adapters for one invocation.

    Usage::

        async with AWSContext(settings) as aws:
            await aws.s3.put_object(...)

    Every client is closed when the block exits, including on failure.
    """

    def __init__(self, settings: Settings, *, region: str | None = None) -> None:
        self.settings = settings
        self.region = region or settings.aws_region
        self._stack: AsyncExitStack | None = None
        self._clients: dict[str, Any] = {}

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "config": Config(
                retries={"max_attempts": self.settings.aws_max_attempts, "mode": "standard"}
            ),
        }
        if self.settings.endpoint_url:
            kwargs["endpoint_url"] = self.settings.endpoint_url
            kwargs.update(LOCAL_CREDENTIALS)
        return kwargs

    async def __aenter__(self) -> AWSContext:
        session = aioboto3.Session(region_name=self.region)
        stack = AsyncExitStack()
        await stack.__aenter__()
        try:
            for name in SERVICES:
                self._clients[name] = await stack.enter_async_context(
                    session.client(name, **self._client_kwargs())
                )
        except BaseException:
            await stack.aclose()
            self._clients.clear()
            raise
        self._stack = stack
        logger.debug(
            "aws_clients_opened",
            region=self.region,
            endpoint=self.settings.endpoint_url or "aws",
        )
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        if self._stack is not None:
            await self._stack.__aexit__(*exc_info)
            self._stack = None
        self._clients.clear()
        logger.debug("aws_clients_closed", region=self.region)

    def client(self, name: str) -> Any:
        try:
            return self._clients[name]
        except KeyError:
            raise RuntimeError(f"AWS client {name!r} used outside of AWSContext") from None

    @property
    def s3(self) -> Any:
        return self.client("s3")

    @property
    def ecs(self) -> Any:
        return self.client("ecs")

    @property
    def elbv2(self) -> Any:
        return self.client("elbv2")

    @property
    def cloudformation(self) -> Any:
        return self.client("cloudformation")
