"""Tests for CLI verify-mode command."""

import argparse
from unittest.mock import patch

import pytest
from holiday.cli.verify_mode import (
    handle_verify_mode_command,
    register_verify_mode_parser,
    verify_mode_command,
)
from holiday.core.errors import ExitCode, ValidationError

pytestmark = pytest.mark.usefixtures("fresh_settings")


@pytest.fixture
def patched_aws(aws_context):
    with patch("holiday.cli.verify_mode.AWSContext", aws_context):
        yield aws_context


class TestVerifyModeCommand:
    def test_work_mode_reached(self, patched_aws, capsys):
        assert verify_mode_command("work", timeout=1, interval=0) == ExitCode.SUCCESS
        assert "running (work mode)" in capsys.readouterr().out

    def test_vacation_mode_reached(self, patched_aws, fleet):
        fleet.ecs.services[("bazaar-cluster", "bazaar")]["desiredCount"] = 0
        assert verify_mode_command("vacation", timeout=1, interval=0) == ExitCode.SUCCESS

    def test_timeout_is_warning(self, patched_aws, fleet, capsys):
        assert verify_mode_command("vacation", timeout=0, interval=0) == ExitCode.WARNING
        assert "Timed out" in capsys.readouterr().out

    def test_missing_services_count_as_vacation(self, patched_aws, fleet):
        fleet.ecs.services.clear()
        assert verify_mode_command("vacation", timeout=0, interval=0) == ExitCode.SUCCESS
        assert verify_mode_command("work", timeout=0, interval=0) == ExitCode.WARNING

    def test_invalid_mode(self):
        with pytest.raises(ValidationError, match="Invalid mode: holiday"):
            verify_mode_command("holiday")

    def test_read_only(self, patched_aws, fleet):
        verify_mode_command("work", timeout=0, interval=0)
        assert fleet.log.mutating == []


class TestParser:
    def _parser(self):
        parser = argparse.ArgumentParser()
        subparsers = parser.add_subparsers(dest="command")
        register_verify_mode_parser(subparsers)
        return parser

    def test_defaults(self):
        args = self._parser().parse_args(["verify-mode", "work"])

        assert args.target_mode == "work"
        assert args.timeout == 300
        assert args.interval == 10

    def test_rejects_unknown_mode(self):
        with pytest.raises(SystemExit):
            self._parser().parse_args(["verify-mode", "holiday"])

    def test_handler(self):
        args = self._parser().parse_args(["verify-mode", "vacation", "--timeout", "60"])
        with patch("holiday.cli.verify_mode.verify_mode_command", return_value=0) as command:
            assert handle_verify_mode_command(args) == 0
        command.assert_called_once_with(mode="vacation", timeout=60.0, interval=10, region=None)
