"""
CLI command for read-only verification.

Reports, per domain, whether the holiday page exists in S3 and where the
domain's listener rule currently sends traffic. Nothing is modified.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from holiday.aws.session import AWSContext
from holiday.cli.common import build_adapters, resolve_settings, run_async
from holiday.cli.ux import console, header, info, print_table, spinner, success, warning
from holiday.config.holiday import HolidayConfiguration, default_configuration
from holiday.config.settings import Settings
from holiday.core.errors import ExitCode
from holiday.models import RouteTarget


@dataclass(frozen=True)
class DomainReport:
    domain: str
    active: bool
    key: str
    size: int | None
    url: str
    target: RouteTarget | None
    priority: int

    @property
    def page_exists(self) -> bool:
        return self.size is not None


@dataclass(frozen=True)
class VerifyReport:
    bucket: str
    hosting_enabled: bool
    domains: list[DomainReport]

    @property
    def missing_pages(self) -> list[DomainReport]:
        return [d for d in self.domains if d.active and not d.page_exists]


async def collect_report(settings: Settings, config: HolidayConfiguration) -> VerifyReport:
    async with AWSContext(settings) as aws:
        adapters = build_adapters(aws, settings, config)
        storage, routing = adapters.storage, adapters.routing

        reports = []
        for domain in config.all_domains:
            active = config.is_active(domain)
            reports.append(
                DomainReport(
                    domain=domain,
                    active=active,
                    key=storage.key_for(domain),
                    size=await storage.object_exists(domain),
                    url=storage.public_url(domain),
                    target=await routing.current_target(domain) if active else None,
                    priority=routing.priority_for(domain),
                )
            )
        hosting = await storage.is_static_hosting_enabled()
    return VerifyReport(bucket=settings.bucket_name, hosting_enabled=hosting, domains=reports)


def _print_report(report: VerifyReport) -> None:
    rows = []
    for d in report.domains:
        page = f"[success]{d.size} bytes[/success]" if d.page_exists else "[error]missing[/error]"
        target = d.target.value if d.target else "-"
        rows.append([d.domain, "yes" if d.active else "no", str(d.priority), page, target])
    print_table(
        f"Holiday pages in {report.bucket}",
        ["Domain", "Active", "Priority", "Page", "Routing"],
        rows,
    )
    console.print()
    info(f"Static website hosting: {'enabled' if report.hosting_enabled else 'disabled'}")
    console.print("[muted]Pages are accessible at:[/muted]")
    for d in report.domains:
        if d.page_exists:
            console.print(f"  {d.url}")


def verify_command(
    bucket: str | None = None,
    region: str | None = None,
    config: HolidayConfiguration | None = None,
) -> int:
    """
    Report holiday page and routing state without changing anything.

    Returns:
        0 if every active domain has its page, 1 otherwise
    """
    settings = resolve_settings(bucket, region)
    config = config or default_configuration()

    header("Verifying holiday pages")
    with spinner("Reading S3 and ALB state..."):
        report = run_async(collect_report(settings, config))
    _print_report(report)

    if report.missing_pages:
        for d in report.missing_pages:
            warning(f"{d.domain}: {d.key} not found")
        return ExitCode.WARNING

    success("All holiday pages for active domains are uploaded")
    return ExitCode.SUCCESS


def register_verify_parser(subparsers: argparse._SubParsersAction) -> None:
    """Register verify subcommand parser."""
    parser = subparsers.add_parser(
        "verify",
        help="Verify that holiday pages are uploaded to S3 and show current routing",
    )
    parser.add_argument("--bucket", help="S3 bucket holding holiday pages")
    parser.add_argument("--region", help="AWS region")


def handle_verify_command(args: argparse.Namespace) -> int:
    """Handle verify subcommand."""
    return verify_command(
        bucket=getattr(args, "bucket", None),
        region=getattr(args, "region", None),
    )
