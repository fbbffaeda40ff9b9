"""Data models for Event Hubs scale-down."""

from .types import (
    NamespaceMetadata,
    NotificationSeverity,
    OutcomeStatus,
    PolicySkip,
    ReconciliationOutcome,
    ScaleDownInput,
    ScaleDownPolicy,
    ScaleDownRunResult,
    Subscription,
    SubscriptionScan,
)

__all__ = [
    "NamespaceMetadata",
    "NotificationSeverity",
    "OutcomeStatus",
    "PolicySkip",
    "ReconciliationOutcome",
    "ScaleDownInput",
    "ScaleDownPolicy",
    "ScaleDownRunResult",
    "Subscription",
    "SubscriptionScan",
]
