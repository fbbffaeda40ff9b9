"""Scale-down policy extraction from namespace tags."""

import logging
from typing import Optional, Union

from .models.types import NamespaceMetadata, PolicySkip, ScaleDownPolicy
from .resource_id import extract_resource_group

logger = logging.getLogger(__name__)

SCALE_DOWN_TAG = "ScaleDownTUs"

# Target used when the tag value is not a positive integer
DEFAULT_TARGET_THROUGHPUT_UNITS = 1

NOT_AUTO_INFLATE_REASON = "not configured for auto-inflate"


def is_tagged(meta: NamespaceMetadata, tag: str = SCALE_DOWN_TAG) -> bool:
    """Check if a namespace opted into scale-down."""
    return tag in (meta.tags or {})


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    try:
        parsed = int(value.strip())
    except (AttributeError, TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def parse_target_throughput_units(value: Optional[str]) -> int:
    """Parse a tag value into a target throughput unit count.

    Args:
        value: Raw tag value

    Returns:
        The parsed count if it is a positive integer, otherwise
        DEFAULT_TARGET_THROUGHPUT_UNITS
    """
    target = _parse_positive_int(value)
    if target is None:
        return DEFAULT_TARGET_THROUGHPUT_UNITS
    return target


def extract_policy(
    meta: NamespaceMetadata,
    subscription_id: str,
    tag: str = SCALE_DOWN_TAG,
) -> Union[ScaleDownPolicy, PolicySkip]:
    """Decide whether a namespace is in scope and what its target capacity is.

    Args:
        meta: Namespace metadata from the subscription listing
        subscription_id: Subscription owning the namespace
        tag: Tag key that carries the target

    Returns:
        ScaleDownPolicy for eligible namespaces, PolicySkip otherwise

    Raises:
        MalformedResourceIdError: If the namespace's resource id has no
            resource group
    """
    if not is_tagged(meta, tag):
        return PolicySkip(namespace=meta.name, reason=f"no {tag} tag")

    if meta.auto_inflate_enabled is not True:
        logger.info(f"Namespace {meta.name} {NOT_AUTO_INFLATE_REASON} - skipping")
        return PolicySkip(namespace=meta.name, reason=NOT_AUTO_INFLATE_REASON)

    resource_group = extract_resource_group(meta.resource_id)
    raw_target = meta.tags[tag]
    target = _parse_positive_int(raw_target)
    if target is None:
        target = DEFAULT_TARGET_THROUGHPUT_UNITS
        logger.warning(
            f"Namespace {meta.name} has {tag}={raw_target!r}, "
            f"using default target of {target} TUs"
        )

    return ScaleDownPolicy(
        subscription_id=subscription_id,
        resource_group=resource_group,
        namespace=meta.name,
        target_throughput_units=target,
    )
