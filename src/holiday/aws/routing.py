"""
ALB listener rule operations for holiday mode.

Each active domain owns exactly one rule on the HTTPS listener, identified by
its configured priority. On vacation the rule redirects to the domain's page
in S3; at work it forwards to the service's target group.
"""

from __future__ import annotations

from typing import Any

import structlog

from holiday.aws.base import AWS_ERRORS
from holiday.aws.storage import key_for
from holiday.config.holiday import HolidayConfiguration
from holiday.core.errors import RoutingError
from holiday.models import Outcome, RouteTarget

logger = structlog.get_logger()

HTTPS_PORT = 443
HOST_HEADER = "host-header"


def _stack_for_service(service: str) -> str:
    return service if service.endswith("-service") else f"{service}-service"


def _action_signature(action: dict[str, Any]) -> tuple[str, ...]:
    """Fields that decide where an action sends traffic."""
    action_type = action.get("Type", "")
    if action_type == "redirect":
        redirect = action.get("RedirectConfig", {})
        return (
            "redirect",
            redirect.get("Host", ""),
            redirect.get("Path", ""),
            redirect.get("StatusCode", ""),
        )
    if action_type == "forward":
        arn = action.get("TargetGroupArn")
        if not arn:
            groups = action.get("ForwardConfig", {}).get("TargetGroups", [])
            arn = groups[0].get("TargetGroupArn", "") if len(groups) == 1 else ""
        return ("forward", arn or "")
    return (action_type,)


def _rule_hosts(rule: dict[str, Any]) -> set[str]:
    hosts: set[str] = set()
    for condition in rule.get("Conditions", []):
        if condition.get("Field") != HOST_HEADER:
            continue
        hosts.update(condition.get("HostHeaderConfig", {}).get("Values", []))
        hosts.update(condition.get("Values", []))
    return hosts


class RoutingAdapter:
    """Points each active domain's listener rule at S3 or ECS."""

    def __init__(
        self,
        elbv2: Any,
        cloudformation: Any,
        config: HolidayConfiguration,
        *,
        storage_host: str,
        stack_name: str = "sagebrush-alb",
        listener_arn: str | None = None,
    ) -> None:
        self._elbv2 = elbv2
        self._cloudformation = cloudformation
        self._config = config
        self.storage_host = storage_host
        self.stack_name = stack_name
        self._listener_arn = listener_arn
        self._target_groups: dict[str, str] = {}

    def priority_for(self, domain: str) -> int:
        return self._config.priority_for(domain)

    async def _stack_outputs(self, stack_name: str) -> dict[str, str]:
        response = await self._cloudformation.describe_stacks(StackName=stack_name)
        stacks = response.get("Stacks") or []
        if not stacks:
            return {}
        return {
            output["OutputKey"]: output["OutputValue"]
            for output in stacks[0].get("Outputs", [])
            if "OutputKey" in output and "OutputValue" in output
        }

    async def listener_arn(self) -> str:
        """ARN of the HTTPS listener that carries the holiday rules."""
        if self._listener_arn:
            return self._listener_arn

        try:
            outputs = await self._stack_outputs(self.stack_name)
        except AWS_ERRORS as exc:
            logger.warning("routing_stack_lookup_failed", stack=self.stack_name, error=str(exc))
            outputs = {}

        for key in sorted(outputs, key=lambda k: "HTTPS" not in k):
            if "Listener" in key:
                self._listener_arn = outputs[key]
                return self._listener_arn

        self._listener_arn = await self._listener_from_load_balancer()
        return self._listener_arn

    async def _listener_from_load_balancer(self) -> str:
        try:
            balancers = await self._elbv2.describe_load_balancers(Names=[self.stack_name])
            load_balancers = balancers.get("LoadBalancers") or []
            if not load_balancers:
                raise RoutingError(
                    f"Load balancer {self.stack_name} not found", {"stack": self.stack_name}
                )
            listeners = await self._elbv2.describe_listeners(
                LoadBalancerArn=load_balancers[0]["LoadBalancerArn"]
            )
        except AWS_ERRORS as exc:
            raise RoutingError(
                f"Could not determine listener for {self.stack_name}",
                {"operation": "describe_listeners", "stack": self.stack_name},
            ) from exc

        for listener in listeners.get("Listeners", []):
            if listener.get("Port") == HTTPS_PORT:
                return listener["ListenerArn"]
        raise RoutingError(
            f"No HTTPS listener on load balancer {self.stack_name}", {"stack": self.stack_name}
        )

    async def target_group_arn(self, service: str) -> str:
        """Target group of a service, from its stack outputs or by name."""
        if service in self._target_groups:
            return self._target_groups[service]

        stack = _stack_for_service(service)
        try:
            arn = (await self._stack_outputs(stack)).get("TargetGroupArn")
        except AWS_ERRORS as exc:
            logger.warning("routing_stack_lookup_failed", stack=stack, error=str(exc))
            arn = None

        if not arn:
            try:
                response = await self._elbv2.describe_target_groups(Names=[service])
                groups = response.get("TargetGroups") or []
                arn = groups[0].get("TargetGroupArn") if groups else None
            except AWS_ERRORS as exc:
                logger.warning("routing_target_group_lookup_failed", service=service, error=str(exc))

        if not arn:
            raise RoutingError(
                f"Target group for service {service} not found", {"service": service}
            )
        self._target_groups[service] = arn
        return arn

    async def _rules(self, listener_arn: str) -> list[dict[str, Any]]:
        rules: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"ListenerArn": listener_arn}
        while True:
            response = await self._elbv2.describe_rules(**kwargs)
            rules.extend(response.get("Rules", []))
            marker = response.get("NextMarker")
            if not marker:
                return rules
            kwargs["Marker"] = marker

    async def _listener_rules(self, domain: str) -> list[dict[str, Any]]:
        listener = await self.listener_arn()
        try:
            return await self._rules(listener)
        except AWS_ERRORS as exc:
            raise RoutingError(
                f"Failed to read listener rules for {domain}",
                {
                    "operation": "describe_rules",
                    "domain": domain,
                    "priority": str(self.priority_for(domain)),
                },
            ) from exc

    def _rule_at_priority(
        self, domain: str, rules: list[dict[str, Any]]
    ) -> dict[str, Any] | None:
        priority = str(self.priority_for(domain))
        return next((rule for rule in rules if rule.get("Priority") == priority), None)

    async def find_rule(self, domain: str) -> dict[str, Any] | None:
        """The listener rule at the domain's priority, if any."""
        return self._rule_at_priority(domain, await self._listener_rules(domain))

    async def actions_for(self, domain: str, target: RouteTarget) -> list[dict[str, Any]]:
        if target is RouteTarget.STORAGE:
            return [
                {
                    "Type": "redirect",
                    "Order": 1,
                    "RedirectConfig": {
                        "Protocol": "HTTPS",
                        "Port": str(HTTPS_PORT),
                        "Host": self.storage_host,
                        "Path": f"/{key_for(domain)}",
                        "StatusCode": "HTTP_301",
                    },
                }
            ]
        arn = await self.target_group_arn(self._config.service_for(domain))
        return [{"Type": "forward", "Order": 1, "TargetGroupArn": arn}]

    async def route_to(self, domain: str, target: RouteTarget) -> Outcome:
        """Make the domain's rule send traffic to ``target``, creating it if absent."""
        if not self._config.is_active(domain):
            raise RoutingError(
                f"Domain {domain} is not managed by holiday mode", {"domain": domain}
            )

        priority = self.priority_for(domain)
        rules = await self._listener_rules(domain)
        rule = self._rule_at_priority(domain, rules)
        actions = await self.actions_for(domain, target)

        if rule is None:
            # A second rule for the same host would be shadowed by the first one
            other = next(
                (r for r in rules if not r.get("IsDefault") and domain in _rule_hosts(r)),
                None,
            )
            if other is not None:
                raise RoutingError(
                    f"{domain} is already routed by the rule at priority {other['Priority']}",
                    {"domain": domain, "priority": priority, "existing_priority": other["Priority"]},
                )
        else:
            hosts = _rule_hosts(rule)
            if hosts and domain not in hosts:
                raise RoutingError(
                    f"Rule at priority {priority} belongs to {', '.join(sorted(hosts))}",
                    {"domain": domain, "priority": priority},
                )
            current = [_action_signature(a) for a in rule.get("Actions", [])]
            if current == [_action_signature(a) for a in actions]:
                logger.info("routing_unchanged", domain=domain, priority=priority, target=target.value)
                return Outcome.SKIPPED

        try:
            if rule is not None:
                await self._elbv2.modify_rule(RuleArn=rule["RuleArn"], Actions=actions)
            else:
                await self._elbv2.create_rule(
                    ListenerArn=await self.listener_arn(),
                    Priority=priority,
                    Conditions=[{"Field": HOST_HEADER, "HostHeaderConfig": {"Values": [domain]}}],
                    Actions=actions,
                )
        except AWS_ERRORS as exc:
            raise RoutingError(
                f"Failed to route {domain} to {target.value}",
                {
                    "operation": "modify_rule" if rule is not None else "create_rule",
                    "domain": domain,
                    "priority": priority,
                },
            ) from exc

        logger.info(
            "routing_updated",
            domain=domain,
            priority=priority,
            target=target.value,
            created=rule is None,
        )
        return Outcome.PERFORMED

    async def current_target(self, domain: str) -> RouteTarget | None:
        """Where the domain's rule currently sends traffic, None without a rule."""
        if not self._config.is_active(domain):
            return None
        rule = await self.find_rule(domain)
        if rule is None or not rule.get("Actions"):
            return None
        first = sorted(rule["Actions"], key=lambda a: a.get("Order", 0))[0]
        if first.get("Type") == "redirect":
            return RouteTarget.STORAGE
        if first.get("Type") == "forward":
            return RouteTarget.COMPUTE
        return None
