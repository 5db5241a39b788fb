"""Root test configuration."""

import logging

import pytest
import structlog
from fake_aws import CallLog, FakeAWSContext, Fleet
from holiday.config.settings import get_settings


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


@pytest.fixture
def fleet():
    """Fake AWS account currently in work mode."""
    return Fleet()


@pytest.fixture
def call_log():
    return CallLog()


@pytest.fixture
def aws_context(fleet):
    return FakeAWSContext(fleet)


@pytest.fixture
def fresh_settings(monkeypatch):
    """Default settings regardless of the caller's environment."""
    for name in ("HOLIDAY_BUCKET_NAME", "HOLIDAY_AWS_REGION", "HOLIDAY_LISTENER_ARN", "HOLIDAY_ALB_STACK_NAME"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
