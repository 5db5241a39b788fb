"""Shared wiring for CLI commands."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Coroutine, TypeVar

from holiday.aws.compute import ComputeAdapter
from holiday.aws.routing import RoutingAdapter
from holiday.aws.session import AWSContext
from holiday.aws.storage import StorageAdapter
from holiday.config.holiday import HolidayConfiguration
from holiday.config.settings import Settings, get_settings

T = TypeVar("T")


@dataclass
class Adapters:
    storage: StorageAdapter
    compute: ComputeAdapter
    routing: RoutingAdapter


def resolve_settings(bucket: str | None = None, region: str | None = None) -> Settings:
    """Settings with per-invocation overrides applied."""
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if bucket:
        overrides["bucket_name"] = bucket
    if region:
        overrides["aws_region"] = region
    return settings.model_copy(update=overrides) if overrides else settings


def build_adapters(
    aws: AWSContext, settings: Settings, config: HolidayConfiguration
) -> Adapters:
    storage = StorageAdapter(
        aws.s3,
        settings.bucket_name,
        region=aws.region,
        endpoint_url=settings.endpoint_url,
    )
    return Adapters(
        storage=storage,
        compute=ComputeAdapter(aws.ecs),
        routing=RoutingAdapter(
            aws.elbv2,
            aws.cloudformation,
            config,
            storage_host=storage.website_host,
            stack_name=settings.alb_stack_name,
            listener_arn=settings.listener_arn,
        ),
    )


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Helper to run async functions from sync CLI commands."""
    return asyncio.run(coro)
