"""
Holiday Configuration System.

Provides:
- Pydantic-based settings (environment variables, .env files)
- The static holiday configuration table (domains, services, priorities)
"""

from holiday.config.holiday import (
    DEFAULT_PRIORITY,
    DEFAULT_STEADY_STATE_COUNT,
    HolidayConfiguration,
    default_configuration,
)
from holiday.config.settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Configuration table
    "DEFAULT_PRIORITY",
    "DEFAULT_STEADY_STATE_COUNT",
    "HolidayConfiguration",
    "default_configuration",
]
