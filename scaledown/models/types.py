"""Type definitions for Event Hubs scale-down."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class OutcomeStatus(str, Enum):
    """What happened to a namespace during a run."""

    SKIPPED = "skipped"
    UNCHANGED = "unchanged"
    UPDATED = "updated"
    FAILED = "failed"


class NotificationSeverity(str, Enum):
    """Notification severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class Subscription:
    """An Azure subscription visible to the service principal."""

    subscription_id: str
    display_name: str
    state: Optional[str] = None

    def __str__(self) -> str:
        """String representation."""
        return f"{self.display_name} ({self.subscription_id})"


@dataclass
class NamespaceMetadata:
    """Raw description of an Event Hubs namespace as listed by the platform."""

    resource_id: str
    name: str
    tags: dict[str, str] = field(default_factory=dict)
    auto_inflate_enabled: Optional[bool] = None
    capacity: Optional[int] = None
    sku_name: Optional[str] = None
    sku_tier: Optional[str] = None
    maximum_throughput_units: Optional[int] = None

    def __str__(self) -> str:
        """String representation."""
        sku = self.sku_name or "unknown SKU"
        if self.capacity is not None:
            return f"{self.name} ({sku}, {self.capacity} TUs)"
        return f"{self.name} ({sku})"


@dataclass(frozen=True)
class ScaleDownPolicy:
    """Scale-down target for one tagged, auto-inflate enabled namespace."""

    subscription_id: str
    resource_group: str
    namespace: str
    target_throughput_units: int

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.namespace} in RG {self.resource_group} "
            f"-> {self.target_throughput_units} TUs"
        )


@dataclass
class PolicySkip:
    """A tagged namespace that is not eligible for scale-down."""

    namespace: str
    reason: str


@dataclass
class ReconciliationOutcome:
    """Result of handling a single namespace."""

    subscription_id: str
    namespace: str
    status: OutcomeStatus
    reason: str = ""
    resource_group: Optional[str] = None
    previous_capacity: Optional[int] = None
    target_capacity: Optional[int] = None
    dry_run: bool = False

    def __str__(self) -> str:
        """String representation."""
        mode = "[DRY RUN] " if self.dry_run else ""
        if self.status == OutcomeStatus.UPDATED:
            return (
                f"{mode}[{self.namespace}] Updated from {self.previous_capacity} "
                f"to {self.target_capacity} TUs"
            )
        elif self.status == OutcomeStatus.UNCHANGED:
            return (
                f"{mode}[{self.namespace}] Already at or below target "
                f"(Current: {self.previous_capacity} Target: {self.target_capacity})"
            )
        elif self.status == OutcomeStatus.SKIPPED:
            return f"{mode}[{self.namespace}] Skipped: {self.reason}"
        return f"{mode}[{self.namespace}] Failed: {self.reason}"


@dataclass
class SubscriptionScan:
    """Policies and scan-time outcomes for one subscription."""

    subscription_id: str
    policies: list[ScaleDownPolicy] = field(default_factory=list)
    outcomes: list[ReconciliationOutcome] = field(default_factory=list)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.subscription_id}: {len(self.policies)} eligible, "
            f"{len(self.outcomes)} skipped or malformed"
        )


@dataclass
class ScaleDownInput:
    """Input parameters for the scale-down workflow."""

    dry_run: bool = False


@dataclass
class ScaleDownRunResult:
    """Result of a scale-down workflow execution."""

    subscriptions_checked: int = 0
    outcomes: list[ReconciliationOutcome] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False

    def _with_status(self, status: OutcomeStatus) -> list[ReconciliationOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def updated(self) -> list[ReconciliationOutcome]:
        return self._with_status(OutcomeStatus.UPDATED)

    @property
    def unchanged(self) -> list[ReconciliationOutcome]:
        return self._with_status(OutcomeStatus.UNCHANGED)

    @property
    def skipped(self) -> list[ReconciliationOutcome]:
        return self._with_status(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> list[ReconciliationOutcome]:
        return self._with_status(OutcomeStatus.FAILED)

    def __str__(self) -> str:
        """String representation."""
        mode = "[DRY RUN] " if self.dry_run else ""
        return (
            f"{mode}Checked {self.subscriptions_checked} subscriptions - "
            f"Updated: {len(self.updated)}, Unchanged: {len(self.unchanged)}, "
            f"Skipped: {len(self.skipped)}, Failed: {len(self.failed)}, "
            f"Subscription errors: {len(self.errors)}"
        )
