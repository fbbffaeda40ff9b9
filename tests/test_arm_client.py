"""Tests for the Resource Manager client."""

import asyncio
import json
import time

import httpx
import pytest
from unittest.mock import MagicMock

from azure.core.credentials import AccessToken

from scaledown.arm_client import (
    ARM_SCOPE,
    EVENTHUB_API_VERSION,
    ArmClient,
    ArmError,
    build_credential,
    parse_namespace,
)

BASE_URL = "https://arm.test"

NAMESPACE_PAYLOAD = {
    "id": "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.EventHub/namespaces/ns-a",
    "name": "ns-a",
    "tags": {"ScaleDownTUs": "2"},
    "sku": {"name": "Standard", "tier": "Standard", "capacity": 10},
    "properties": {"isAutoInflateEnabled": True, "maximumThroughputUnits": 20},
}


def make_credential() -> MagicMock:
    credential = MagicMock()
    credential.get_token.return_value = AccessToken("test-token", 4102444800)
    return credential


def make_client(handler) -> ArmClient:
    return ArmClient(
        make_credential(),
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
    )


def test_parse_namespace():
    """Test conversion of an ARM payload to NamespaceMetadata."""
    meta = parse_namespace(NAMESPACE_PAYLOAD)

    assert meta.name == "ns-a"
    assert meta.resource_id == NAMESPACE_PAYLOAD["id"]
    assert meta.tags == {"ScaleDownTUs": "2"}
    assert meta.auto_inflate_enabled is True
    assert meta.capacity == 10
    assert meta.sku_name == "Standard"
    assert meta.sku_tier == "Standard"
    assert meta.maximum_throughput_units == 20
    assert str(meta) == "ns-a (Standard, 10 TUs)"


def test_parse_namespace_without_optional_fields():
    """Tags and auto-inflate may be absent from the payload."""
    meta = parse_namespace({"id": "x", "name": "ns", "tags": None, "sku": {"name": "Basic"}})

    assert meta.tags == {}
    assert meta.auto_inflate_enabled is None
    assert meta.capacity is None


def test_build_credential(settings):
    """The credential is built from the service principal settings."""
    credential = build_credential(settings)

    assert credential.__class__.__name__ == "ClientSecretCredential"


@pytest.mark.asyncio
class TestArmClient:
    """Tests for ArmClient against a mocked transport."""

    async def test_requests_are_authenticated(self):
        """Every request carries a bearer token for the ARM scope."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json={"value": []})

        client = make_client(handler)
        try:
            await client.list_subscriptions()
        finally:
            await client.close()

        assert seen == ["Bearer test-token"]

    async def test_list_subscriptions_follows_next_link(self):
        """Test that every page of subscriptions is returned."""
        def handler(request: httpx.Request) -> httpx.Response:
            if "skiptoken" in str(request.url):
                return httpx.Response(
                    200,
                    json={"value": [{"subscriptionId": "sub-2", "displayName": "Two", "state": "Enabled"}]},
                )
            assert request.url.params["api-version"] == "2022-12-01"
            return httpx.Response(
                200,
                json={
                    "value": [{"subscriptionId": "sub-1", "displayName": "One", "state": "Enabled"}],
                    "nextLink": f"{BASE_URL}/subscriptions?api-version=2022-12-01&$skiptoken=abc",
                },
            )

        client = make_client(handler)
        try:
            subscriptions = await client.list_subscriptions()
        finally:
            await client.close()

        assert [(s.subscription_id, s.display_name) for s in subscriptions] == [
            ("sub-1", "One"),
            ("sub-2", "Two"),
        ]

    async def test_list_namespaces(self):
        """Test listing the namespaces of one subscription."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/subscriptions/sub-1/providers/Microsoft.EventHub/namespaces"
            assert request.url.params["api-version"] == EVENTHUB_API_VERSION
            return httpx.Response(200, json={"value": [NAMESPACE_PAYLOAD]})

        client = make_client(handler)
        try:
            namespaces = await client.list_namespaces("sub-1")
        finally:
            await client.close()

        assert [ns.name for ns in namespaces] == ["ns-a"]

    async def test_list_namespaces_failure_raises(self):
        """Listing errors are raised to the caller."""
        client = make_client(lambda request: httpx.Response(403, json={"error": {"code": "AuthorizationFailed"}}))
        try:
            with pytest.raises(httpx.HTTPStatusError):
                await client.list_namespaces("sub-1")
        finally:
            await client.close()

    async def test_get_namespace(self):
        """Test fetching a namespace by resource group and name."""
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "GET"
            assert request.url.path == (
                "/subscriptions/sub-1/resourceGroups/rg-1"
                "/providers/Microsoft.EventHub/namespaces/ns-a"
            )
            return httpx.Response(200, json=NAMESPACE_PAYLOAD)

        client = make_client(handler)
        try:
            meta = await client.get_namespace("sub-1", "rg-1", "ns-a")
        finally:
            await client.close()

        assert meta.capacity == 10

    async def test_update_namespace_capacity_preserves_sku(self):
        """The update sends only the SKU with the new capacity."""
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            bodies.append(json.loads(request.content))
            updated = dict(NAMESPACE_PAYLOAD, sku={"name": "Standard", "tier": "Standard", "capacity": 2})
            return httpx.Response(200, json=updated)

        client = make_client(handler)
        try:
            meta = await client.update_namespace_capacity(
                "sub-1", "rg-1", "ns-a", sku_name="Standard", capacity=2, sku_tier="Standard"
            )
        finally:
            await client.close()

        assert bodies == [{"sku": {"name": "Standard", "capacity": 2, "tier": "Standard"}}]
        assert meta.capacity == 2

    async def test_update_accepted_without_body(self):
        """An asynchronous accept returns no namespace."""
        client = make_client(lambda request: httpx.Response(202))
        try:
            meta = await client.update_namespace_capacity(
                "sub-1", "rg-1", "ns-a", sku_name="Standard", capacity=2
            )
        finally:
            await client.close()

        assert meta is None

    async def test_token_requested_for_arm_scope(self):
        """The credential is asked for a Resource Manager token."""
        credential = make_credential()
        client = ArmClient(
            credential,
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"value": []})),
        )
        try:
            await client.list_subscriptions()
        finally:
            await client.close()

        credential.get_token.assert_called_with(ARM_SCOPE)

    async def test_token_fetch_does_not_block_event_loop(self):
        """A slow token fetch runs off the event loop."""
        credential = MagicMock()

        def slow_get_token(*scopes):
            time.sleep(0.3)
            return AccessToken("test-token", 4102444800)

        credential.get_token.side_effect = slow_get_token
        client = ArmClient(
            credential,
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"value": []})),
        )
        loop = asyncio.get_running_loop()
        started = loop.time()
        ticks = []

        async def ticker():
            while True:
                await asyncio.sleep(0.02)
                ticks.append(loop.time() - started)

        ticking = asyncio.create_task(ticker())
        try:
            await client.list_subscriptions()
        finally:
            ticking.cancel()
            await client.close()

        assert ticks
        assert ticks[0] < 0.2

    async def test_non_object_namespace_body_raises_arm_error(self):
        """A JSON body that is not an object is rejected."""
        client = make_client(lambda request: httpx.Response(200, json=["unexpected"]))
        try:
            with pytest.raises(ArmError):
                await client.get_namespace("sub-1", "rg-1", "ns-a")
        finally:
            await client.close()


@pytest.mark.parametrize(
    "payload",
    [
        ["unexpected"],
        "namespace",
        {**NAMESPACE_PAYLOAD, "sku": "Standard"},
        {**NAMESPACE_PAYLOAD, "properties": [True]},
        {**NAMESPACE_PAYLOAD, "tags": ["ScaleDownTUs"]},
    ],
)
def test_parse_namespace_rejects_non_object_payloads(payload):
    """Test that malformed payloads raise ArmError instead of AttributeError."""
    with pytest.raises(ArmError):
        parse_namespace(payload)
