"""Temporal activities for the scale-down workflow."""

import logging
from typing import Callable, Optional

from temporalio import activity

from ..arm_client import ArmClient, build_credential
from ..config import Settings
from ..models.types import (
    NotificationSeverity,
    ReconciliationOutcome,
    ScaleDownPolicy,
    Subscription,
    SubscriptionScan,
)
from .capacity_ops import reconcile_capacity
from .namespace_ops import scan_subscription
from .notification_ops import post_slack_message

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], ArmClient]


class ScaleDownActivities:
    """Activities sharing one settings object and one Azure credential.

    Each activity opens its own Resource Manager client and closes it when
    done, so nothing is shared between units of work except the credential.
    """

    def __init__(self, settings: Settings, client_factory: Optional[ClientFactory] = None):
        """Initialize the activities.

        Args:
            settings: Application settings
            client_factory: Builds a Resource Manager client. Defaults to a
                client authenticated as the configured service principal.
        """
        self.settings = settings
        self._credential = None
        if client_factory is None:
            credential = self._credential = build_credential(settings)

            def client_factory() -> ArmClient:
                return ArmClient(
                    credential,
                    base_url=settings.arm_base_url,
                    timeout=settings.arm_request_timeout,
                )

        self._client_factory = client_factory

    def close(self) -> None:
        """Release the service principal credential's HTTP session."""
        if self._credential is not None:
            self._credential.close()
            self._credential = None

    @activity.defn
    async def list_subscriptions(self) -> list[Subscription]:
        """List all subscriptions visible to the service principal.

        Raises:
            Exception: If the API request fails
        """
        activity.logger.info("Activity: list_subscriptions started")

        client = self._client_factory()
        try:
            subscriptions = await client.list_subscriptions()
            activity.logger.info(f"Number of subscriptions: {len(subscriptions)}")
            return subscriptions
        except Exception as e:
            activity.logger.error(f"Failed to list subscriptions: {e}")
            raise
        finally:
            await client.close()

    @activity.defn
    async def scan_namespaces(self, subscription_id: str) -> SubscriptionScan:
        """Find the namespaces to scale down in one subscription.

        Raises:
            Exception: If listing the subscription's namespaces fails
        """
        activity.logger.info(f"Activity: scan_namespaces for {subscription_id}")

        client = self._client_factory()
        try:
            return await scan_subscription(
                client,
                subscription_id,
                tag=self.settings.scale_down_tag,
                should_manage=self.settings.should_manage_namespace,
            )
        except Exception as e:
            activity.logger.error(
                f"Error getting namespaces for subscription {subscription_id}: {e}"
            )
            raise
        finally:
            await client.close()

    @activity.defn
    async def reconcile_namespace(
        self, policy: ScaleDownPolicy, dry_run: bool
    ) -> ReconciliationOutcome:
        """Bring one namespace down to its target throughput units.

        dry_run comes from the workflow input; worker settings do not override it.
        """
        activity.logger.info(f"Activity: reconcile_namespace for {policy}")

        client = self._client_factory()
        try:
            outcome = await reconcile_capacity(client, policy, dry_run=dry_run)
        finally:
            await client.close()

        activity.logger.info(str(outcome))
        return outcome

    @activity.defn
    async def send_slack_notification(
        self, message: str, severity: NotificationSeverity
    ) -> bool:
        """Send a notification to Slack.

        Returns:
            True if sent, False if no webhook is configured

        Raises:
            Exception: If the Slack API request fails
        """
        activity.logger.info(f"Activity: send_slack_notification with severity {severity}")

        # If no Slack webhook is configured, skip silently
        if not self.settings.slack_webhook_url:
            activity.logger.info("No Slack webhook configured, skipping notification")
            return False

        try:
            await post_slack_message(self.settings.slack_webhook_url, message, severity)
        except Exception as e:
            activity.logger.error(f"Failed to send Slack notification: {e}")
            raise

        activity.logger.info("Successfully sent Slack notification")
        return True
