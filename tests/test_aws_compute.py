"""Tests for aws/compute.py."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fake_aws import CallLog, FakeECS, client_error
from holiday.aws.compute import ComputeAdapter, cluster_for
from holiday.core.errors import ComputeError, ServiceNotFoundError
from holiday.models import Mode, Outcome


@pytest.fixture
def ecs():
    return FakeECS(CallLog())


@pytest.fixture
def compute(ecs):
    return ComputeAdapter(ecs)


@pytest.mark.parametrize(
    "service,cluster",
    [
        ("bazaar", "bazaar-cluster"),
        ("bazaar-service", "bazaar-cluster"),
        ("sagebrushweb-service", "sagebrushweb-cluster"),
        ("neon-web-service", "neon-web-cluster"),
        ("nlf-web-service", "nlf-web-cluster"),
        ("service", "service-cluster"),
        ("-service", "-cluster"),
        ("", "-cluster"),
    ],
)
def test_cluster_for(service, cluster):
    assert cluster_for(service) == cluster
    assert ComputeAdapter(None).cluster_for(service) == cluster


def test_cluster_for_is_deterministic():
    assert cluster_for("bazaar-service") == cluster_for("bazaar-service")


class TestDescribe:
    @pytest.mark.asyncio
    async def test_existing_service(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=2, running=1)

        state = await compute.describe("bazaar")

        assert state.cluster == "bazaar-cluster"
        assert (state.desired_count, state.running_count) == (2, 1)
        assert ecs.log.named("describe_services") == [
            {"cluster": "bazaar-cluster", "services": ["bazaar"]}
        ]

    @pytest.mark.asyncio
    async def test_missing_service(self, compute):
        assert await compute.describe("bazaar") is None

    @pytest.mark.asyncio
    async def test_missing_cluster(self, compute, ecs):
        ecs.log.failures["describe_services"] = client_error("ClusterNotFoundException", "DescribeServices")
        assert await compute.describe("bazaar") is None

    @pytest.mark.asyncio
    async def test_inactive_service_counts_as_missing(self):
        client = MagicMock()
        client.describe_services = AsyncMock(
            return_value={"services": [{"status": "INACTIVE", "desiredCount": 0, "runningCount": 0}]}
        )
        assert await ComputeAdapter(client).describe("bazaar") is None

    @pytest.mark.asyncio
    async def test_throttling_propagates(self, compute, ecs):
        original = client_error("ThrottlingException", "DescribeServices")
        ecs.log.failures["describe_services"] = original

        with pytest.raises(ComputeError) as exc_info:
            await compute.describe("bazaar")

        assert exc_info.value.__cause__ is original
        assert exc_info.value.details["service"] == "bazaar"
        assert exc_info.value.details["cluster"] == "bazaar-cluster"


class TestStatePredicates:
    @pytest.mark.asyncio
    async def test_no_services_exist(self, compute):
        assert await compute.are_services_stopped(["bazaar", "other-service"]) is True
        assert await compute.are_services_running(["bazaar", "other-service"]) is False

    @pytest.mark.asyncio
    async def test_empty_set(self, compute):
        assert await compute.are_services_stopped([]) is True
        assert await compute.are_services_running([]) is False

    @pytest.mark.asyncio
    async def test_all_running(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=2)
        ecs.add_service("api-cluster", "api-service", desired=1)

        assert await compute.are_services_running(["bazaar", "api-service"]) is True
        assert await compute.are_services_stopped(["bazaar", "api-service"]) is False

    @pytest.mark.asyncio
    async def test_all_stopped(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=0)

        assert await compute.are_services_stopped(["bazaar", "never-deployed"]) is True
        assert await compute.are_services_running(["bazaar"]) is False

    @pytest.mark.asyncio
    async def test_mid_transition_is_neither(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1, running=0)

        assert await compute.are_services_running(["bazaar"]) is False
        assert await compute.are_services_stopped(["bazaar"]) is False

    @pytest.mark.asyncio
    async def test_one_missing_service_blocks_running(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1)
        assert await compute.are_services_running(["bazaar", "never-deployed"]) is False

    @pytest.mark.asyncio
    async def test_is_in_mode(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1)
        assert await compute.is_in_mode(["bazaar"], Mode.WORK) is True
        assert await compute.is_in_mode(["bazaar"], Mode.VACATION) is False


class TestScaleTo:
    @pytest.mark.asyncio
    async def test_stop_running_service(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1)

        assert await compute.scale_to("bazaar", 0) is Outcome.PERFORMED
        assert ecs.log.named("update_service") == [
            {"cluster": "bazaar-cluster", "service": "bazaar", "desiredCount": 0}
        ]

    @pytest.mark.asyncio
    async def test_start_stopped_service(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=0)

        assert await compute.scale_to("bazaar", 2) is Outcome.PERFORMED
        assert ecs.services[("bazaar-cluster", "bazaar")]["desiredCount"] == 2

    @pytest.mark.asyncio
    async def test_already_at_count_is_noop(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1)

        assert await compute.scale_to("bazaar", 1) is Outcome.SKIPPED
        assert ecs.log.named("update_service") == []

    @pytest.mark.asyncio
    async def test_stopping_missing_service_is_noop(self, compute, ecs):
        assert await compute.scale_to("bazaar", 0) is Outcome.SKIPPED
        assert ecs.log.named("update_service") == []

    @pytest.mark.asyncio
    async def test_starting_missing_service_fails(self, compute):
        with pytest.raises(ServiceNotFoundError) as exc_info:
            await compute.scale_to("bazaar", 1)
        assert exc_info.value.details == {"service": "bazaar", "cluster": "bazaar-cluster"}

    @pytest.mark.asyncio
    async def test_service_disappearing_during_stop_is_noop(self):
        client = MagicMock()
        client.describe_services = AsyncMock(
            return_value={"services": [{"status": "ACTIVE", "desiredCount": 1, "runningCount": 1}]}
        )
        client.update_service = AsyncMock(
            side_effect=client_error("ServiceNotFoundException", "UpdateService")
        )
        compute = ComputeAdapter(client)

        assert await compute.scale_to("bazaar", 0) is Outcome.SKIPPED
        with pytest.raises(ServiceNotFoundError):
            await compute.scale_to("bazaar", 2)

    @pytest.mark.asyncio
    async def test_update_failure_propagates(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1)
        ecs.log.failures["update_service"] = client_error("AccessDeniedException", "UpdateService")

        with pytest.raises(ComputeError, match="Failed to scale service bazaar to 0"):
            await compute.scale_to("bazaar", 0)


class TestWaitForMode:
    @pytest.mark.asyncio
    async def test_returns_true_once_satisfied(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=0)
        assert await compute.wait_for_mode(["bazaar"], Mode.VACATION, timeout=1, interval=0) is True

    @pytest.mark.asyncio
    async def test_times_out(self, compute, ecs):
        ecs.add_service("bazaar-cluster", "bazaar", desired=1, running=0)
        assert await compute.wait_for_mode(["bazaar"], Mode.WORK, timeout=0, interval=0) is False

    @pytest.mark.asyncio
    async def test_retries_after_read_errors(self):
        client = MagicMock()
        client.describe_services = AsyncMock(
            side_effect=[
                client_error("ThrottlingException", "DescribeServices"),
                {"services": [{"status": "ACTIVE", "desiredCount": 1, "runningCount": 1}]},
            ]
        )
        compute = ComputeAdapter(client)

        assert await compute.wait_for_mode(["bazaar"], Mode.WORK, timeout=5, interval=0) is True
        assert client.describe_services.await_count == 2
