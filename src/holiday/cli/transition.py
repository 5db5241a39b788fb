"""
CLI commands for entering vacation and work mode.

Exit codes:
    0 = Transition completed, or the fleet was already in the requested mode
    1 = Transition completed but endpoints did not settle within --wait timeout
    11 = A step failed; earlier steps stay applied
    130 = Interrupted; the step in progress finished and is reported
"""

from __future__ import annotations

import argparse

from holiday.aws.session import AWSContext
from holiday.cli.common import build_adapters, resolve_settings, run_async
from holiday.cli.ux import console, error, header, info, print_table, spinner, success, warning
from holiday.config.holiday import HolidayConfiguration, default_configuration
from holiday.config.settings import Settings
from holiday.core.errors import ExitCode, TransitionError, TransitionInterruptedError
from holiday.health import EndpointChecker
from holiday.models import Mode, Outcome
from holiday.orchestration.engine import HolidayOrchestrator
from holiday.orchestration.results import TransitionResult
from holiday.pages import SUPPORT_EMAIL

OUTCOME_STYLE = {
    Outcome.PERFORMED: "[success]performed[/success]",
    Outcome.SKIPPED: "[muted]skipped[/muted]",
    Outcome.VERIFIED: "[info]verified[/info]",
    Outcome.FAILED: "[error]failed[/error]",
}


async def _run_transition(
    mode: Mode,
    settings: Settings,
    config: HolidayConfiguration,
    wait: bool,
) -> tuple[TransitionResult, bool | None]:
    async with AWSContext(settings) as aws:
        adapters = build_adapters(aws, settings, config)
        orchestrator = HolidayOrchestrator(
            config,
            adapters.storage,
            adapters.compute,
            adapters.routing,
            disable_hosting_on_work=settings.disable_hosting_on_work,
            service_timeout=settings.service_timeout,
            service_interval=settings.service_interval,
        )
        result = await orchestrator.run(mode)

    if not wait:
        return result, None

    checker = EndpointChecker(
        storage_host=adapters.storage.website_host, timeout=settings.http_timeout
    )
    ready = await checker.wait_for_mode(
        mode,
        config.active_domains,
        timeout=settings.health_timeout,
        interval=settings.health_interval,
    )
    return result, ready


def print_steps(result: TransitionResult) -> None:
    if not result.steps:
        return
    rows = [
        [s.step, s.operation, s.resource, OUTCOME_STYLE[s.outcome] + (f" {s.error}" if s.error else "")]
        for s in result.steps
    ]
    print_table(f"{result.mode.value.title()} transition", ["Step", "Operation", "Resource", "Outcome"], rows)


def _print_already(mode: Mode) -> None:
    if mode is Mode.VACATION:
        success("You're already on vacation! All ECS services are already stopped.")
        info("No changes were made.")
    else:
        success("You're already working! ECS services are already running.")
        info("No changes were made.")


def _print_done(result: TransitionResult) -> None:
    print_steps(result)
    console.print()
    if result.mode is Mode.VACATION:
        success("Holiday mode enabled! Static pages are now serving.")
        info(f"Customers can contact {SUPPORT_EMAIL} if needed.")
    else:
        success("Work mode enabled! ECS services are now running.")
    if not result.mutated:
        info("Every resource was already in place; no changes were made.")
    for step in result.failed:
        warning(f"Non-fatal step {step.step} failed for {step.resource}: {step.error}")


def transition_command(
    mode: Mode,
    bucket: str | None = None,
    region: str | None = None,
    wait: bool = False,
    config: HolidayConfiguration | None = None,
) -> int:
    """
    Move the fleet into ``mode``.

    Args:
        mode: Target mode
        bucket: S3 bucket override for holiday pages
        region: AWS region override
        wait: Poll public endpoints until they answer as the mode expects
        config: Configuration table (defaults to the production table)

    Returns:
        Exit code (0, 1) - failures raise TransitionError
    """
    settings = resolve_settings(bucket, region)
    config = config or default_configuration()

    if mode is Mode.VACATION:
        header("Enabling holiday mode")
    else:
        header("Returning to work mode")

    try:
        with spinner(f"Entering {mode.value} mode..."):
            result, ready = run_async(_run_transition(mode, settings, config, wait))
    except TransitionInterruptedError as exc:
        print_steps(exc.result)
        warning(f"Interrupted during step {exc.step}; calls already sent were allowed to finish.")
        error("Completed steps were not rolled back. Run the command again to finish the transition.")
        raise
    except TransitionError as exc:
        print_steps(exc.result)
        error(f"Stopped at step {exc.step} ({exc.resource}); completed steps were not rolled back.")
        raise
    except KeyboardInterrupt:
        warning("Interrupted. Run `holiday verify` to see where routing and pages stand.")
        raise

    if result.already_in_state:
        _print_already(mode)
    else:
        _print_done(result)

    if ready is False:
        warning("Some endpoints are not answering as expected yet. Check ALB and ECS.")
        return ExitCode.WARNING
    if ready:
        success("All endpoints are responding as expected.")
    return ExitCode.SUCCESS


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--bucket", help="S3 bucket holding holiday pages")
    parser.add_argument("--region", help="AWS region")


def register_transition_parsers(subparsers: argparse._SubParsersAction) -> None:
    """Register vacation and work subcommand parsers."""
    vacation = subparsers.add_parser(
        "vacation",
        help="Enable holiday mode: upload static pages and stop ECS services",
    )
    _add_common_arguments(vacation)
    vacation.add_argument(
        "--wait",
        action="store_true",
        help="Wait for domains to redirect to the holiday pages",
    )
    vacation.set_defaults(mode=Mode.VACATION)

    work = subparsers.add_parser(
        "work",
        help="Disable holiday mode: start ECS services and restore normal routing",
    )
    _add_common_arguments(work)
    work.add_argument(
        "--wait",
        action="store_true",
        help="Wait for /health on every domain to answer 200",
    )
    work.set_defaults(mode=Mode.WORK)


def handle_transition_command(args: argparse.Namespace) -> int:
    """Handle vacation/work subcommands."""
    return transition_command(
        mode=args.mode,
        bucket=getattr(args, "bucket", None),
        region=getattr(args, "region", None),
        wait=getattr(args, "wait", False),
    )
