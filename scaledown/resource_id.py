"""Parsing of Azure Resource Manager resource identifiers."""

RESOURCE_GROUPS_SEGMENT = "resourceGroups"
PROVIDERS_SEGMENT = "providers"


class MalformedResourceIdError(ValueError):
    """Raised when a resource identifier does not have the expected layout."""

    def __init__(self, resource_id: str, problem: str):
        self.resource_id = resource_id
        self.problem = problem
        super().__init__(f"Malformed resource id {resource_id!r}: {problem}")


def _segments(resource_id: str) -> list[str]:
    return [segment for segment in resource_id.strip().split("/") if segment]


def parse_resource_id(resource_id: str) -> dict[str, str]:
    """Split a resource identifier into its leading key/value segment pairs.

    ``/subscriptions/s1/resourceGroups/rg/providers/Microsoft.EventHub/namespaces/ns1``
    becomes ``{"subscriptions": "s1", "resourceGroups": "rg",
    "providers": "Microsoft.EventHub", "namespaces": "ns1"}``.

    Args:
        resource_id: The hierarchical resource identifier

    Returns:
        Mapping of segment key to segment value. Segments before
        ``resourceGroups`` are only included when they form whole pairs.

    Raises:
        MalformedResourceIdError: If the ``resourceGroups/<name>/providers``
            part is missing or incomplete
    """
    segments = _segments(resource_id)

    try:
        index = segments.index(RESOURCE_GROUPS_SEGMENT)
    except ValueError:
        raise MalformedResourceIdError(
            resource_id, f"no '{RESOURCE_GROUPS_SEGMENT}' segment"
        ) from None

    if index + 1 >= len(segments):
        raise MalformedResourceIdError(resource_id, "resource group name is missing")
    if segments[index + 1] == PROVIDERS_SEGMENT:
        raise MalformedResourceIdError(resource_id, "resource group name is empty")
    if index + 2 >= len(segments) or segments[index + 2] != PROVIDERS_SEGMENT:
        raise MalformedResourceIdError(
            resource_id,
            f"resource group is not followed by a '{PROVIDERS_SEGMENT}' segment",
        )

    parsed: dict[str, str] = {}
    # Prefix pairs (e.g. subscriptions/<id>) only when they line up
    if index % 2 == 0:
        for key, value in zip(segments[0:index:2], segments[1:index:2]):
            parsed[key] = value
    rest = segments[index:]
    for key, value in zip(rest[0::2], rest[1::2]):
        parsed.setdefault(key, value)
    return parsed


def extract_resource_group(resource_id: str) -> str:
    """Extract the owning resource group name from a resource identifier.

    Raises:
        MalformedResourceIdError: If the identifier has no
            ``resourceGroups/<name>/providers`` part
    """
    return parse_resource_id(resource_id)[RESOURCE_GROUPS_SEGMENT]
