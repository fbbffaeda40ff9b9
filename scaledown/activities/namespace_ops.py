"""Namespace discovery for a single subscription."""

import logging
from typing import Callable, Optional

from ..arm_client import ArmClient
from ..models.types import (
    OutcomeStatus,
    PolicySkip,
    ReconciliationOutcome,
    SubscriptionScan,
)
from ..policy import SCALE_DOWN_TAG, extract_policy, is_tagged
from ..resource_id import MalformedResourceIdError

logger = logging.getLogger(__name__)

EXCLUDED_BY_CONFIGURATION = "excluded by configuration"


async def scan_subscription(
    client: ArmClient,
    subscription_id: str,
    tag: str = SCALE_DOWN_TAG,
    should_manage: Optional[Callable[[str], bool]] = None,
) -> SubscriptionScan:
    """Find the namespaces in a subscription that should be scaled down.

    Namespaces without the scale-down tag are dropped before anything else and
    never reported. Tagged namespaces that are ineligible or whose resource id
    cannot be parsed are reported as outcomes so the run can log them.

    Args:
        client: Resource Manager client
        subscription_id: The subscription to scan
        tag: Tag key that opts a namespace in
        should_manage: Optional allow/deny filter on namespace names

    Returns:
        SubscriptionScan with one policy per eligible namespace

    Raises:
        httpx.HTTPError: If listing the subscription's namespaces fails
    """
    namespaces = await client.list_namespaces(subscription_id)
    tagged = [ns for ns in namespaces if is_tagged(ns, tag)]
    logger.info(
        f"Subscription {subscription_id}: {len(namespaces)} namespaces, "
        f"{len(tagged)} tagged with {tag}"
    )

    scan = SubscriptionScan(subscription_id=subscription_id)

    for meta in tagged:
        if should_manage is not None and not should_manage(meta.name):
            logger.info(f"Namespace {meta.name} {EXCLUDED_BY_CONFIGURATION} - skipping")
            scan.outcomes.append(
                ReconciliationOutcome(
                    subscription_id=subscription_id,
                    namespace=meta.name,
                    status=OutcomeStatus.SKIPPED,
                    reason=EXCLUDED_BY_CONFIGURATION,
                )
            )
            continue

        logger.info(f"Processing namespace {meta.name} to extract RG and Throughput Units")

        try:
            decision = extract_policy(meta, subscription_id, tag)
        except MalformedResourceIdError as e:
            logger.error(f"Skipping namespace {meta.name}: {e}")
            scan.outcomes.append(
                ReconciliationOutcome(
                    subscription_id=subscription_id,
                    namespace=meta.name,
                    status=OutcomeStatus.FAILED,
                    reason=str(e),
                )
            )
            continue

        if isinstance(decision, PolicySkip):
            scan.outcomes.append(
                ReconciliationOutcome(
                    subscription_id=subscription_id,
                    namespace=decision.namespace,
                    status=OutcomeStatus.SKIPPED,
                    reason=decision.reason,
                )
            )
        else:
            scan.policies.append(decision)

    logger.info(str(scan))
    return scan
