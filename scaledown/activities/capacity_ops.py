"""Capacity reconciliation for a single namespace."""

import logging

import httpx

from ..arm_client import ArmClient, ArmError
from ..models.types import OutcomeStatus, ReconciliationOutcome, ScaleDownPolicy

logger = logging.getLogger(__name__)


async def reconcile_capacity(
    client: ArmClient,
    policy: ScaleDownPolicy,
    dry_run: bool = False,
) -> ReconciliationOutcome:
    """Lower a namespace's throughput units to its target if it is above it.

    The namespace is re-fetched by resource group and name because the
    capacity seen while scanning may be stale. No update is sent when the
    namespace is already at or below target, so running this repeatedly is
    safe.

    Args:
        client: Resource Manager client
        policy: Policy for the namespace
        dry_run: If true, report the update without sending it

    Returns:
        ReconciliationOutcome describing what happened. Fetch and update
        failures are returned as FAILED outcomes, not raised.
    """
    target = policy.target_throughput_units
    outcome = ReconciliationOutcome(
        subscription_id=policy.subscription_id,
        namespace=policy.namespace,
        status=OutcomeStatus.FAILED,
        resource_group=policy.resource_group,
        target_capacity=target,
        dry_run=dry_run,
    )

    logger.info(f"Reconciling capacity for namespace {policy.namespace}")

    try:
        current = await client.get_namespace(
            policy.subscription_id, policy.resource_group, policy.namespace
        )
        if current.capacity is None or not current.sku_name:
            raise ArmError(
                f"Namespace {policy.namespace} did not report a SKU with capacity"
            )
        outcome.previous_capacity = current.capacity

        if current.capacity <= target:
            outcome.status = OutcomeStatus.UNCHANGED
            logger.info(
                f"Namespace: {policy.namespace} in RG: {policy.resource_group} "
                f"already at or below target capacity "
                f"(Current: {current.capacity} Target: {target})"
            )
            return outcome

        if dry_run:
            logger.info(
                f"[DRY RUN] Would update Namespace: {policy.namespace} in RG: "
                f"{policy.resource_group} from: {current.capacity} to: {target}"
            )
        else:
            logger.info(
                f"Updating Namespace: {policy.namespace} in RG: "
                f"{policy.resource_group} from: {current.capacity} to: {target}"
            )
            await client.update_namespace_capacity(
                policy.subscription_id,
                policy.resource_group,
                policy.namespace,
                sku_name=current.sku_name,
                capacity=target,
                sku_tier=current.sku_tier,
            )

        outcome.status = OutcomeStatus.UPDATED
        return outcome

    except (httpx.HTTPError, ArmError, ValueError) as e:
        logger.error(f"Error scaling down namespace {policy.namespace}: {e}")
        outcome.status = OutcomeStatus.FAILED
        outcome.reason = str(e) or type(e).__name__
        return outcome
