"""Tests for the vacation and work CLI commands."""

import argparse
from unittest.mock import AsyncMock, patch

import pytest
from fake_aws import client_error
from holiday.cli.transition import (
    handle_transition_command,
    register_transition_parsers,
    transition_command,
)
from holiday.core.errors import ExitCode, TransitionError, TransitionInterruptedError
from holiday.models import Mode, Outcome
from holiday.orchestration.results import TransitionResult

pytestmark = pytest.mark.usefixtures("fresh_settings")


def _text(capsys):
    return " ".join(capsys.readouterr().out.split())


@pytest.fixture
def patched_aws(aws_context):
    with patch("holiday.cli.transition.AWSContext", aws_context):
        yield aws_context


class TestTransitionCommand:
    def test_vacation_from_work(self, patched_aws, fleet, capsys):
        code = transition_command(Mode.VACATION)

        assert code == ExitCode.SUCCESS
        assert patched_aws.entered == 1
        assert fleet.ecs.services[("bazaar-cluster", "bazaar")]["desiredCount"] == 0
        out = _text(capsys)
        assert "Holiday mode enabled!" in out
        assert "support@sagebrush.services" in out

    def test_already_on_vacation(self, patched_aws, fleet, capsys):
        transition_command(Mode.VACATION)
        capsys.readouterr()
        fleet.log.clear()

        code = transition_command(Mode.VACATION)

        assert code == ExitCode.SUCCESS
        assert fleet.log.mutating == []
        out = _text(capsys)
        assert "already on vacation" in out
        assert "No changes were made" in out

    def test_already_working(self, patched_aws, fleet, capsys):
        assert transition_command(Mode.WORK) == ExitCode.SUCCESS
        assert "already working" in _text(capsys)
        assert fleet.log.mutating == []

    def test_back_to_work(self, patched_aws, fleet, capsys):
        transition_command(Mode.VACATION)

        assert transition_command(Mode.WORK) == ExitCode.SUCCESS
        assert fleet.rule(200)["Actions"][0]["Type"] == "forward"
        assert "Work mode enabled!" in _text(capsys)

    def test_bucket_override(self, patched_aws, fleet):
        transition_command(Mode.VACATION, bucket="other-bucket")

        assert fleet.log.named("put_object")[0]["Bucket"] == "other-bucket"
        redirect = fleet.rule(200)["Actions"][0]["RedirectConfig"]
        assert redirect["Host"] == "other-bucket.s3.us-west-2.amazonaws.com"

    def test_failure_reports_step_and_reraises(self, patched_aws, fleet, capsys):
        fleet.log.failures["update_service"] = client_error("AccessDenied", "UpdateService")

        with pytest.raises(TransitionError) as exc_info:
            transition_command(Mode.VACATION)

        assert exc_info.value.step == "stop_services"
        out = _text(capsys)
        assert "stop_services" in out
        assert "not rolled back" in out

    def test_interrupt_reports_finished_calls_and_reraises(self, patched_aws, capsys):
        result = TransitionResult(mode=Mode.VACATION)
        result.record("upload_pages", "upload", "www.sagebrush.services", Outcome.PERFORMED)
        interrupted = TransitionInterruptedError(
            "interrupted", step="upload_pages", resource="www.sagebrush.services", result=result
        )

        def run_async(coro):
            coro.close()
            raise interrupted

        with patch("holiday.cli.transition.run_async", side_effect=run_async):
            with pytest.raises(TransitionInterruptedError) as exc_info:
                transition_command(Mode.VACATION)

        assert exc_info.value.exit_code == ExitCode.INTERRUPTED
        out = _text(capsys)
        assert "upload_pages" in out
        assert "Interrupted during step upload_pages" in out
        assert "not rolled back" in out

    def test_wait_success(self, patched_aws):
        with patch(
            "holiday.cli.transition.EndpointChecker.wait_for_mode", new=AsyncMock(return_value=True)
        ) as wait:
            code = transition_command(Mode.VACATION, wait=True)

        assert code == ExitCode.SUCCESS
        args, kwargs = wait.call_args
        assert args == (Mode.VACATION, ["www.sagebrush.services"])
        assert kwargs["timeout"] == 300

    def test_wait_timeout_is_warning(self, patched_aws, capsys):
        with patch(
            "holiday.cli.transition.EndpointChecker.wait_for_mode", new=AsyncMock(return_value=False)
        ):
            code = transition_command(Mode.VACATION, wait=True)

        assert code == ExitCode.WARNING
        assert "not answering as expected" in _text(capsys)


class TestParser:
    def _parse(self, argv):
        parser = argparse.ArgumentParser()
        subparsers = parser.add_subparsers(dest="command")
        register_transition_parsers(subparsers)
        return parser.parse_args(argv)

    def test_vacation_arguments(self):
        args = self._parse(["vacation", "--bucket", "b", "--region", "eu-west-1", "--wait"])

        assert args.mode is Mode.VACATION
        assert args.bucket == "b"
        assert args.region == "eu-west-1"
        assert args.wait is True

    def test_work_defaults(self):
        args = self._parse(["work"])

        assert args.mode is Mode.WORK
        assert args.bucket is None
        assert args.wait is False

    def test_handler_passes_arguments(self):
        args = self._parse(["work", "--bucket", "b", "--wait"])

        with patch("holiday.cli.transition.transition_command", return_value=0) as command:
            assert handle_transition_command(args) == 0

        command.assert_called_once_with(mode=Mode.WORK, bucket="b", region=None, wait=True)
