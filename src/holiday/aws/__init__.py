"""AWS adapters used by the holiday orchestrator."""

from holiday.aws.compute import ComputeAdapter, cluster_for
from holiday.aws.routing import RoutingAdapter
from holiday.aws.session import AWSContext
from holiday.aws.storage import StorageAdapter, key_for

__all__ = [
    "AWSContext",
    "ComputeAdapter",
    "RoutingAdapter",
    "StorageAdapter",
    "cluster_for",
    "key_for",
]
