"""Workflow that scales Event Hubs namespaces back down to their tagged targets."""

import logging
from datetime import timedelta

from temporalio import workflow
from temporalio.common import RetryPolicy

with workflow.unsafe.imports_passed_through():
    from ..models.types import (
        NotificationSeverity,
        OutcomeStatus,
        ReconciliationOutcome,
        ScaleDownInput,
        ScaleDownRunResult,
        Subscription,
        SubscriptionScan,
    )
    from ..activities import ScaleDownActivities

logger = logging.getLogger(__name__)

# A failed unit is retried by the next scheduled run, not here
NO_RETRY = RetryPolicy(maximum_attempts=1)


def _failure_reason(error: Exception) -> str:
    """Prefer the activity's own error message over the wrapper's."""
    cause = getattr(error, "cause", None)
    return str(cause or error)


@workflow.defn
class ScaleDownWorkflow:
    """Workflow that lowers auto-inflated throughput units back to target.

    This workflow:
    1. Lists every subscription the service principal can see
    2. Scans each subscription for namespaces tagged for scale-down
    3. Reconciles each eligible namespace to its target throughput units
    4. Sends one Slack notification if anything failed

    A failure only skips its own unit: a subscription whose namespaces cannot
    be listed is skipped, and a namespace that cannot be reconciled does not
    affect its siblings. Only a failure to list subscriptions fails the run.
    """

    def __init__(self):
        """Initialize workflow state."""
        self._outcomes: list[ReconciliationOutcome] = []
        self._subscriptions_total = 0
        self._subscriptions_done = 0

    @workflow.run
    async def run(self, input: ScaleDownInput) -> ScaleDownRunResult:
        """Execute one scale-down pass over all subscriptions.

        Args:
            input: Workflow input parameters

        Returns:
            ScaleDownRunResult with one outcome per tagged namespace

        Raises:
            ActivityError: If the subscriptions cannot be listed
        """
        workflow.logger.info(f"Starting scale-down workflow (dry_run={input.dry_run})")

        # The input alone decides dry-run; every outcome below follows result.dry_run
        result = ScaleDownRunResult(dry_run=input.dry_run)
        self._outcomes = result.outcomes

        try:
            subscriptions: list[Subscription] = await workflow.execute_activity_method(
                ScaleDownActivities.list_subscriptions,
                start_to_close_timeout=timedelta(minutes=2),
                retry_policy=NO_RETRY,
            )
        except Exception as e:
            error_msg = f"Fatal error listing subscriptions: {_failure_reason(e)}"
            workflow.logger.error(error_msg)
            await self._notify(error_msg, NotificationSeverity.CRITICAL)
            raise

        self._subscriptions_total = len(subscriptions)
        workflow.logger.info(f"Number of subscriptions: {len(subscriptions)}")

        for subscription in subscriptions:
            workflow.logger.info(
                f"Processing scaledown for subId: {subscription.subscription_id}, "
                f"Name: {subscription.display_name}"
            )
            result.subscriptions_checked += 1
            await self._process_subscription(subscription, result)
            self._subscriptions_done += 1

        if result.failed or result.errors:
            await self._notify(self._failure_summary(result), NotificationSeverity.ERROR)

        workflow.logger.info(f"Workflow completed: {result}")
        return result

    async def _process_subscription(
        self,
        subscription: Subscription,
        result: ScaleDownRunResult,
    ) -> None:
        try:
            scan: SubscriptionScan = await workflow.execute_activity_method(
                ScaleDownActivities.scan_namespaces,
                subscription.subscription_id,
                start_to_close_timeout=timedelta(minutes=2),
                retry_policy=NO_RETRY,
            )
        except Exception as e:
            error_msg = (
                f"Error getting namespaces for subscription "
                f"{subscription.subscription_id}: {_failure_reason(e)}"
            )
            workflow.logger.error(error_msg)
            result.errors.append(error_msg)
            return

        for outcome in scan.outcomes:
            workflow.logger.info(str(outcome))
        result.outcomes.extend(scan.outcomes)

        for policy in scan.policies:
            try:
                outcome: ReconciliationOutcome = await workflow.execute_activity_method(
                    ScaleDownActivities.reconcile_namespace,
                    args=[policy, result.dry_run],
                    start_to_close_timeout=timedelta(minutes=2),
                    retry_policy=NO_RETRY,
                )
            except Exception as e:
                outcome = ReconciliationOutcome(
                    subscription_id=policy.subscription_id,
                    namespace=policy.namespace,
                    status=OutcomeStatus.FAILED,
                    reason=_failure_reason(e),
                    resource_group=policy.resource_group,
                    target_capacity=policy.target_throughput_units,
                    dry_run=result.dry_run,
                )

            if outcome.status == OutcomeStatus.FAILED:
                workflow.logger.error(str(outcome))
            else:
                workflow.logger.info(str(outcome))
            result.outcomes.append(outcome)

    @staticmethod
    def _failure_summary(result: ScaleDownRunResult) -> str:
        lines = [f"Scale-down run finished with failures: {result}"]
        lines.extend(result.errors)
        lines.extend(str(outcome) for outcome in result.failed)
        return "\n".join(lines)

    async def _notify(self, message: str, severity: NotificationSeverity) -> None:
        try:
            await workflow.execute_activity_method(
                ScaleDownActivities.send_slack_notification,
                args=[message, severity],
                start_to_close_timeout=timedelta(seconds=30),
                retry_policy=NO_RETRY,
            )
        except Exception as notify_error:
            workflow.logger.error(f"Failed to send notification: {notify_error}")

    @workflow.query
    def get_outcomes(self) -> list[ReconciliationOutcome]:
        """Query the namespace outcomes recorded so far."""
        return self._outcomes

    @workflow.query
    def get_status(self) -> str:
        """Query to get current workflow status.

        Returns:
            Status string
        """
        updated = sum(1 for o in self._outcomes if o.status == OutcomeStatus.UPDATED)
        failed = sum(1 for o in self._outcomes if o.status == OutcomeStatus.FAILED)
        return (
            f"Processed {self._subscriptions_done}/{self._subscriptions_total} subscriptions: "
            f"{len(self._outcomes)} namespaces, {updated} updated, {failed} failed"
        )
