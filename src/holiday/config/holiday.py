"""
Holiday configuration table.

The single source of truth for what holiday mode manages: which public
domains fail over to static pages, which ECS service backs each of them, and
which ALB listener rule priority routes each domain.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from holiday.core.errors import ConfigurationError

DEFAULT_PRIORITY = 999
DEFAULT_STEADY_STATE_COUNT = 1


@dataclass(frozen=True)
class HolidayConfiguration:
    """Read-only view of the managed domains, services and rule priorities.

    Construction validates the cross-mapping invariants and raises
    ``ConfigurationError`` on the first violation, before any AWS call.
    """

    domain_mappings: Mapping[str, str]
    listener_priorities: Mapping[str, int]
    ecs_services: frozenset[str]
    steady_state_counts: Mapping[str, int] = field(default_factory=dict)
    known_domains: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        # Freeze the caller's dicts so the table can be shared across tasks
        object.__setattr__(self, "domain_mappings", MappingProxyType(dict(self.domain_mappings)))
        object.__setattr__(
            self, "listener_priorities", MappingProxyType(dict(self.listener_priorities))
        )
        object.__setattr__(
            self, "steady_state_counts", MappingProxyType(dict(self.steady_state_counts))
        )
        object.__setattr__(self, "ecs_services", frozenset(self.ecs_services))
        object.__setattr__(self, "known_domains", frozenset(self.known_domains))
        self._validate()

    def _validate(self) -> None:
        for domain in self.domain_mappings:
            if domain not in self.listener_priorities:
                raise ConfigurationError(
                    f"Domain {domain} has no listener priority", {"domain": domain}
                )

        for domain in self.listener_priorities:
            if domain not in self.domain_mappings:
                raise ConfigurationError(
                    f"Domain {domain} has a priority but no service mapping", {"domain": domain}
                )

        for domain, service in self.domain_mappings.items():
            if service not in self.ecs_services:
                raise ConfigurationError(
                    f"Domain {domain} maps to unmanaged service {service}",
                    {"domain": domain, "service": service},
                )

        for domain, priority in self.listener_priorities.items():
            if priority <= 0 or priority == DEFAULT_PRIORITY:
                raise ConfigurationError(
                    f"Domain {domain} has invalid listener priority {priority}",
                    {"domain": domain, "priority": priority},
                )

        collisions = [p for p, n in Counter(self.listener_priorities.values()).items() if n > 1]
        if collisions:
            raise ConfigurationError(
                f"Listener priority {collisions[0]} is assigned to more than one domain",
                {"priority": collisions[0]},
            )

        for service, count in self.steady_state_counts.items():
            if service not in self.ecs_services:
                raise ConfigurationError(
                    f"Steady-state count given for unmanaged service {service}",
                    {"service": service},
                )
            if count <= 0:
                raise ConfigurationError(
                    f"Steady-state count for {service} must be positive, got {count}",
                    {"service": service, "count": count},
                )

    @property
    def active_domains(self) -> list[str]:
        """Domains that receive holiday failover treatment, sorted."""
        return sorted(self.domain_mappings)

    @property
    def all_domains(self) -> list[str]:
        """Active domains plus every other known public hostname, sorted."""
        return sorted(self.known_domains | set(self.domain_mappings))

    @property
    def services(self) -> list[str]:
        return sorted(self.ecs_services)

    def is_active(self, domain: str) -> bool:
        return domain in self.domain_mappings

    def service_for(self, domain: str) -> str:
        """ECS service backing an active domain.

        Only defined for active domains; raises KeyError otherwise.
        """
        return self.domain_mappings[domain]

    def priority_for(self, domain: str) -> int:
        """Listener rule priority for a domain, DEFAULT_PRIORITY if unmanaged."""
        return self.listener_priorities.get(domain, DEFAULT_PRIORITY)

    def steady_state_count(self, service: str) -> int:
        return self.steady_state_counts.get(service, DEFAULT_STEADY_STATE_COUNT)


def default_configuration() -> HolidayConfiguration:
    """The production table: one unified Bazaar service behind one domain."""
    return HolidayConfiguration(
        domain_mappings={"www.sagebrush.services": "bazaar"},
        listener_priorities={"www.sagebrush.services": 200},
        ecs_services=frozenset({"bazaar"}),
        steady_state_counts={"bazaar": 1},
        known_domains=frozenset(
            {
                "www.sagebrush.services",
                "bazaar.sagebrush.services",
                "www.neonlaw.com",
                "www.neonlaw.org",
            }
        ),
    )
