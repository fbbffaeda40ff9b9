"""Shared fixtures for scale-down tests."""

from typing import Optional

import httpx
import pytest

from scaledown.config import Settings
from scaledown.models.types import NamespaceMetadata, Subscription


def namespace_id(subscription_id: str, resource_group: str, name: str) -> str:
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}"
        f"/providers/Microsoft.EventHub/namespaces/{name}"
    )


def make_namespace(
    name: str,
    subscription_id: str = "sub-1",
    resource_group: str = "rg-1",
    tags: Optional[dict[str, str]] = None,
    auto_inflate_enabled: Optional[bool] = True,
    capacity: Optional[int] = 10,
    sku_name: Optional[str] = "Standard",
    resource_id: Optional[str] = None,
) -> NamespaceMetadata:
    return NamespaceMetadata(
        resource_id=resource_id or namespace_id(subscription_id, resource_group, name),
        name=name,
        tags=tags if tags is not None else {},
        auto_inflate_enabled=auto_inflate_enabled,
        capacity=capacity,
        sku_name=sku_name,
        sku_tier=sku_name,
        maximum_throughput_units=20,
    )


class FakeArmClient:
    """In-memory stand-in for ArmClient.

    Namespaces are keyed by subscription. Listing a subscription in
    ``failing_subscriptions`` or updating a namespace in
    ``failing_updates`` raises an httpx error.
    """

    def __init__(self, subscriptions: list[Subscription], namespaces: dict[str, list[NamespaceMetadata]]):
        self.subscriptions = subscriptions
        self.namespaces = namespaces
        self.failing_subscriptions: set[str] = set()
        self.failing_updates: set[str] = set()
        self.fail_subscription_listing = False
        self.update_calls: list[dict] = []
        self.closed = 0

    def _find(self, subscription_id: str, resource_group: str, name: str) -> NamespaceMetadata:
        for ns in self.namespaces.get(subscription_id, []):
            if ns.name == name and f"/resourceGroups/{resource_group}/" in ns.resource_id:
                return ns
        request = httpx.Request("GET", f"https://management.azure.com/{name}")
        raise httpx.HTTPStatusError(
            f"Namespace {name} not found",
            request=request,
            response=httpx.Response(404, request=request),
        )

    async def list_subscriptions(self) -> list[Subscription]:
        if self.fail_subscription_listing:
            raise httpx.ConnectError("identity endpoint unreachable")
        return list(self.subscriptions)

    async def list_namespaces(self, subscription_id: str) -> list[NamespaceMetadata]:
        if subscription_id in self.failing_subscriptions:
            raise httpx.ConnectError(f"cannot list namespaces in {subscription_id}")
        return list(self.namespaces.get(subscription_id, []))

    async def get_namespace(self, subscription_id: str, resource_group: str, namespace: str) -> NamespaceMetadata:
        return self._find(subscription_id, resource_group, namespace)

    async def update_namespace_capacity(
        self,
        subscription_id: str,
        resource_group: str,
        namespace: str,
        sku_name: str,
        capacity: int,
        sku_tier: Optional[str] = None,
    ) -> NamespaceMetadata:
        self.update_calls.append(
            {
                "subscription_id": subscription_id,
                "resource_group": resource_group,
                "namespace": namespace,
                "sku_name": sku_name,
                "sku_tier": sku_tier,
                "capacity": capacity,
            }
        )
        if namespace in self.failing_updates:
            raise httpx.ConnectError(f"update of {namespace} timed out")
        ns = self._find(subscription_id, resource_group, namespace)
        ns.capacity = capacity
        ns.sku_name = sku_name
        return ns

    async def close(self):
        self.closed += 1


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        temporal_address="localhost:7233",
        temporal_namespace="default",
        temporal_api_key="test-key",
        azure_client_id="client-id",
        azure_client_secret="client-secret",
        azure_tenant_id="tenant-id",
        namespace_allowlist=[],
        namespace_denylist=[],
        dry_run_mode=False,
        slack_webhook_url=None,
    )


@pytest.fixture
def scenario() -> FakeArmClient:
    """Subscription S1 with ns-a (tagged, 10 TUs) and ns-b (untagged)."""
    return FakeArmClient(
        subscriptions=[Subscription(subscription_id="S1", display_name="Subscription One")],
        namespaces={
            "S1": [
                make_namespace("ns-a", subscription_id="S1", tags={"ScaleDownTUs": "2"}, capacity=10),
                make_namespace("ns-b", subscription_id="S1", tags={}, capacity=10),
            ]
        },
    )
