"""Activities for the scale-down workflow."""

from .capacity_ops import reconcile_capacity
from .namespace_ops import scan_subscription
from .scale_down import ScaleDownActivities

__all__ = [
    "ScaleDownActivities",
    "reconcile_capacity",
    "scan_subscription",
]
