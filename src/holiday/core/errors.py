"""
Unified error handling for Holiday CLI commands.

This module provides standardized error handling, exit codes, and
error reporting for all CLI commands.

Exit Codes:
- 0: Success (including "already in target state")
- 1: Warning (advisory, e.g. verification timed out)
- 10: Configuration error
- 11: Provider error (AWS call failed, transition aborted)
- 12: Validation error
- 127: Unknown/internal error
- 130: Interrupted (Ctrl-C)
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, TypeVar

import structlog

if TYPE_CHECKING:
    from holiday.orchestration.results import TransitionResult

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class HolidayError(Exception):
    """Base exception for Holiday errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(HolidayError):
    """Raised when the holiday configuration table is inconsistent."""

    exit_code = ExitCode.CONFIG_ERROR


class ValidationError(HolidayError):
    """Raised for invalid user input."""

    exit_code = ExitCode.VALIDATION_ERROR


class ProviderError(HolidayError):
    """Raised when an AWS service call fails."""

    exit_code = ExitCode.PROVIDER_ERROR


class StorageError(ProviderError):
    """S3 operation failed."""


class ComputeError(ProviderError):
    """ECS operation failed."""


class ServiceNotFoundError(ComputeError):
    """An ECS service that must be started does not exist."""


class RoutingError(ProviderError):
    """ELBv2 listener rule operation failed."""


class TransitionError(ProviderError):
    """A mode transition aborted part-way through.

    Completed steps are not rolled back; ``result`` holds every step that ran
    before the failure so operators can see how far the transition got.
    """

    def __init__(
        self,
        message: str,
        *,
        step: str,
        resource: str,
        result: TransitionResult,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, {"step": step, "resource": resource, **(details or {})})
        self.step = step
        self.resource = resource
        self.result = result


class TransitionInterruptedError(TransitionError):
    """A transition was cancelled part-way through.

    Calls already sent for the interrupted step were allowed to finish and are
    recorded in ``result``.
    """

    exit_code = ExitCode.INTERRUPTED


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI entry points that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Exit codes:
        - HolidayError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except HolidayError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=int(e.exit_code),
                        **e.details,
                    )
                exit_with_error(e, exit=False)
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return ExitCode.INTERRUPTED
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=int(ExitCode.UNKNOWN_ERROR),
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: HolidayError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    if error.__cause__ is not None:
        msg = f"{msg}: {error.__cause__}"
    return msg


def exit_with_error(error: HolidayError, exit: bool = True) -> None:
    """Print error and, unless told otherwise, exit with its code."""
    from holiday.cli.ux import error as print_error

    print_error(format_error_message(error))
    if exit:
        sys.exit(error.exit_code)
