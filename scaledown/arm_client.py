"""Client for the Azure Resource Manager (ARM) REST API."""

import asyncio
import logging
from typing import Any, Optional

import httpx
from azure.core.credentials import TokenCredential
from azure.identity import ClientSecretCredential

from .config import Settings
from .models.types import NamespaceMetadata, Subscription

logger = logging.getLogger(__name__)

ARM_SCOPE = "https://management.azure.com/.default"
SUBSCRIPTIONS_API_VERSION = "2022-12-01"
EVENTHUB_API_VERSION = "2024-01-01"
EVENTHUB_PROVIDER = "Microsoft.EventHub"


class ArmError(Exception):
    """Raised when Resource Manager returns data we cannot use."""


def build_credential(settings: Settings) -> ClientSecretCredential:
    """Create the service principal credential from settings."""
    return ClientSecretCredential(
        tenant_id=settings.azure_tenant_id,
        client_id=settings.azure_client_id,
        client_secret=settings.azure_client_secret,
    )


class BearerTokenAuth(httpx.Auth):
    """Attach an Azure AD bearer token to every request.

    The credential caches tokens and refreshes them close to expiry, so asking
    it on every request only hits the identity endpoint when needed.
    Under an async client the synchronous credential runs in a worker thread,
    so a token fetch never blocks the event loop.
    """

    def __init__(self, credential: TokenCredential, scope: str = ARM_SCOPE):
        self._credential = credential
        self._scope = scope

    def auth_flow(self, request: httpx.Request):
        token = self._credential.get_token(self._scope)
        request.headers["Authorization"] = f"Bearer {token.token}"
        yield request

    async def async_auth_flow(self, request: httpx.Request):
        token = await asyncio.to_thread(self._credential.get_token, self._scope)
        request.headers["Authorization"] = f"Bearer {token.token}"
        yield request


def parse_namespace(data: dict[str, Any]) -> NamespaceMetadata:
    """Convert an ARM Event Hubs namespace payload to NamespaceMetadata.

    Raises:
        ArmError: If the payload or one of its nested objects is not a JSON object
    """
    if not isinstance(data, dict):
        raise ArmError(f"Expected a namespace object, got {type(data).__name__}")

    sections = {}
    for key in ("sku", "properties", "tags"):
        value = data.get(key)
        if value is not None and not isinstance(value, dict):
            raise ArmError(f"Namespace field {key!r} is a {type(value).__name__}, not an object")
        sections[key] = value or {}
    sku, properties, tags = sections["sku"], sections["properties"], sections["tags"]

    return NamespaceMetadata(
        resource_id=data.get("id") or "",
        name=data.get("name") or "",
        tags={str(k): str(v) for k, v in tags.items()},
        auto_inflate_enabled=properties.get("isAutoInflateEnabled"),
        capacity=sku.get("capacity"),
        sku_name=sku.get("name"),
        sku_tier=sku.get("tier"),
        maximum_throughput_units=properties.get("maximumThroughputUnits"),
    )


class ArmClient:
    """Client for the subscription and Event Hubs namespace endpoints of ARM."""

    def __init__(
        self,
        credential: TokenCredential,
        base_url: str = "https://management.azure.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the Resource Manager client.

        Args:
            credential: Authenticated Azure credential
            base_url: Base URL for Resource Manager
            timeout: Timeout in seconds for each request
            transport: Optional httpx transport (used in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            auth=BearerTokenAuth(credential),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def _namespace_url(
        self, subscription_id: str, resource_group: str, namespace: str
    ) -> str:
        return (
            f"{self.base_url}/subscriptions/{subscription_id}"
            f"/resourceGroups/{resource_group}"
            f"/providers/{EVENTHUB_PROVIDER}/namespaces/{namespace}"
        )

    async def _list_paged(self, url: str, api_version: str) -> list[dict[str, Any]]:
        """Fetch every page of an ARM list operation."""
        items: list[dict[str, Any]] = []
        params: Optional[dict[str, str]] = {"api-version": api_version}
        next_url: Optional[str] = url

        while next_url:
            response = await self.client.get(next_url, params=params)
            response.raise_for_status()
            data = response.json()
            if not isinstance(data, dict):
                raise ArmError(f"Expected a list page object from {next_url}, got {type(data).__name__}")
            items.extend(data.get("value", []))
            # nextLink already carries api-version and the continuation token
            next_url = data.get("nextLink")
            params = None

        return items

    async def list_subscriptions(self) -> list[Subscription]:
        """List all subscriptions visible to the credential.

        Returns:
            List of Subscription objects

        Raises:
            httpx.HTTPError: If the API request fails
        """
        logger.info("Fetching list of subscriptions from Resource Manager")

        try:
            items = await self._list_paged(
                f"{self.base_url}/subscriptions", SUBSCRIPTIONS_API_VERSION
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to list subscriptions: {e}")
            raise

        subscriptions = [
            Subscription(
                subscription_id=item.get("subscriptionId"),
                display_name=item.get("displayName") or "",
                state=item.get("state"),
            )
            for item in items
            if item.get("subscriptionId")
        ]
        logger.info(f"Found {len(subscriptions)} subscriptions")
        return subscriptions

    async def list_namespaces(self, subscription_id: str) -> list[NamespaceMetadata]:
        """List all Event Hubs namespaces in a subscription.

        Args:
            subscription_id: The subscription to list

        Returns:
            List of NamespaceMetadata objects

        Raises:
            httpx.HTTPError: If the API request fails
        """
        logger.info(f"Getting namespaces for {subscription_id}")

        try:
            items = await self._list_paged(
                f"{self.base_url}/subscriptions/{subscription_id}"
                f"/providers/{EVENTHUB_PROVIDER}/namespaces",
                EVENTHUB_API_VERSION,
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to list namespaces for {subscription_id}: {e}")
            raise

        namespaces = [parse_namespace(item) for item in items]
        logger.info(f"Found {len(namespaces)} namespaces in {subscription_id}")
        return namespaces

    async def get_namespace(
        self, subscription_id: str, resource_group: str, namespace: str
    ) -> NamespaceMetadata:
        """Get the live details of one namespace.

        Args:
            subscription_id: Subscription owning the namespace
            resource_group: Resource group owning the namespace
            namespace: Namespace name

        Returns:
            NamespaceMetadata with the current SKU and capacity

        Raises:
            httpx.HTTPError: If the API request fails
        """
        logger.info(f"Fetching namespace {namespace} in RG {resource_group}")

        try:
            response = await self.client.get(
                self._namespace_url(subscription_id, resource_group, namespace),
                params={"api-version": EVENTHUB_API_VERSION},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to get namespace {namespace}: {e}")
            raise

        return parse_namespace(response.json())

    async def update_namespace_capacity(
        self,
        subscription_id: str,
        resource_group: str,
        namespace: str,
        sku_name: str,
        capacity: int,
        sku_tier: Optional[str] = None,
    ) -> Optional[NamespaceMetadata]:
        """Set the throughput capacity of a namespace, keeping its SKU.

        Args:
            subscription_id: Subscription owning the namespace
            resource_group: Resource group owning the namespace
            namespace: Namespace name
            sku_name: Current SKU name, sent back unchanged
            capacity: New throughput unit count
            sku_tier: Current SKU tier, sent back unchanged when known

        Returns:
            The updated namespace, or None if the platform accepted the
            update asynchronously without a body

        Raises:
            httpx.HTTPError: If the API request fails
        """
        sku: dict[str, Any] = {"name": sku_name, "capacity": capacity}
        if sku_tier:
            sku["tier"] = sku_tier

        logger.info(
            f"Updating namespace {namespace} in RG {resource_group} "
            f"to {capacity} TUs ({sku_name})"
        )

        try:
            response = await self.client.patch(
                self._namespace_url(subscription_id, resource_group, namespace),
                params={"api-version": EVENTHUB_API_VERSION},
                json={"sku": sku},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Failed to update namespace {namespace}: {e}")
            raise

        if not response.content:
            return None
        return parse_namespace(response.json())
