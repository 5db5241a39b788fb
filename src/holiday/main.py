"""
Holiday CLI - toggle between static holiday pages and ECS services.

Usage:
    holiday vacation       # serve static pages, stop ECS services
    holiday work           # start ECS services, restore normal routing
    holiday verify         # report pages and routing, change nothing
    holiday verify-mode work|vacation
"""

from __future__ import annotations

import argparse
from typing import Sequence

from holiday.cli import (
    handle_transition_command,
    handle_verify_command,
    handle_verify_mode_command,
    register_transition_parsers,
    register_verify_parser,
    register_verify_mode_parser,
)
from holiday.core.errors import ExitCode, main_with_error_handling
from holiday.logging import bind_context, configure_logging

HANDLERS = {
    "vacation": handle_transition_command,
    "work": handle_transition_command,
    "verify": handle_verify_command,
    "verify-mode": handle_verify_mode_command,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="holiday",
        description="Toggle between static holiday pages and ECS services",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for structured logs (default: WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command")
    register_transition_parsers(subparsers)
    register_verify_parser(subparsers)
    register_verify_mode_parser(subparsers)
    return parser


@main_with_error_handling()
def run(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, json_logs=args.json_logs)

    handler = HANDLERS.get(args.command)
    if handler is None:
        parser.print_help()
        return ExitCode.VALIDATION_ERROR
    bind_context(command=args.command).debug("command_started")
    return handler(args)


def main(argv: Sequence[str] | None = None) -> None:
    raise SystemExit(int(run(argv)))


if __name__ == "__main__":
    main()
