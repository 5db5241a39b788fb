"""Core modules for Holiday - centralized definitions and utilities."""

from holiday.core.errors import (
    ComputeError,
    ConfigurationError,
    ExitCode,
    HolidayError,
    ProviderError,
    RoutingError,
    ServiceNotFoundError,
    StorageError,
    TransitionError,
    TransitionInterruptedError,
    ValidationError,
    exit_with_error,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "HolidayError",
    "ConfigurationError",
    "ProviderError",
    "StorageError",
    "ComputeError",
    "ServiceNotFoundError",
    "RoutingError",
    "TransitionError",
    "TransitionInterruptedError",
    "ValidationError",
    "main_with_error_handling",
    "format_error_message",
    "exit_with_error",
]
