"""
CLI command that waits for ECS services to match a mode.

Exit codes:
    0 = Services are in the expected state
    1 = Timed out before the services settled
"""

from __future__ import annotations

import argparse

from holiday.aws.compute import ComputeAdapter
from holiday.aws.session import AWSContext
from holiday.cli.common import resolve_settings, run_async
from holiday.cli.ux import error, header, info, success
from holiday.config.holiday import HolidayConfiguration, default_configuration
from holiday.config.settings import Settings
from holiday.core.errors import ExitCode, ValidationError
from holiday.models import Mode


async def _wait_for_mode(
    mode: Mode, settings: Settings, config: HolidayConfiguration, timeout: float, interval: float
) -> bool:
    async with AWSContext(settings) as aws:
        compute = ComputeAdapter(aws.ecs)
        return await compute.wait_for_mode(
            config.services, mode, timeout=timeout, interval=interval
        )


def verify_mode_command(
    mode: str,
    timeout: float = 300,
    interval: float = 10,
    region: str | None = None,
    config: HolidayConfiguration | None = None,
) -> int:
    """Poll ECS until services are stopped (vacation) or running (work)."""
    try:
        target = Mode(mode)
    except ValueError:
        raise ValidationError(
            f"Invalid mode: {mode}. Use 'work' or 'vacation'", {"mode": mode}
        ) from None

    settings = resolve_settings(region=region)
    config = config or default_configuration()

    header(f"Verifying ECS services are in {target.value} mode")
    info(f"Will time out after {int(timeout)} seconds")

    if run_async(_wait_for_mode(target, settings, config, timeout, interval)):
        if target is Mode.VACATION:
            success("All ECS services are stopped (vacation mode)")
        else:
            success("All ECS services are running (work mode)")
        return ExitCode.SUCCESS

    error(f"Timed out: services did not reach {target.value} mode within {int(timeout)}s")
    return ExitCode.WARNING


def register_verify_mode_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register verify-mode subcommand parser."""
    parser = subparsers.add_parser(
        "verify-mode",
        help="Verify ECS services are in the expected state for a mode",
    )
    parser.add_argument("target_mode", choices=[m.value for m in Mode], help="Mode to verify")
    parser.add_argument("--timeout", type=float, default=300, help="Seconds to wait (default: 300)")
    parser.add_argument("--interval", type=float, default=10, help="Seconds between checks")
    parser.add_argument("--region", help="AWS region")


def handle_verify_mode_command(args: argparse.Namespace) -> int:
    """Handle verify-mode subcommand."""
    return verify_mode_command(
        mode=args.target_mode,
        timeout=args.timeout,
        interval=args.interval,
        region=getattr(args, "region", None),
    )
