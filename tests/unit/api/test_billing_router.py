"""Unit tests for the billing relay endpoint."""

import pytest

URL = "/api/v1/billing/subscription-events"


@pytest.fixture(autouse=True)
def stripe_prices(monkeypatch):
    """Price ids read by the subscription sync built at startup."""
    monkeypatch.setenv("STRIPE_PRICE_CURIOUS", "price_curious")
    monkeypatch.setenv("STRIPE_PRICE_ACTIVE", "price_active")
    monkeypatch.setenv("STRIPE_PRICE_QUANT", "price_quant")


EVENT = {
    "id": "evt_1",
    "type": "customer.subscription.updated",
    "data": {
        "object": {
            "id": "sub_1",
            "customer": "cus_1",
            "status": "active",
            "items": {"data": [{"price": {"id": "price_quant"}}]},
        }
    },
}


class TestSubscriptionEventsAuth:
    """The relay endpoint always needs the API key."""

    def test_missing_key_is_401(self, client, relay_api_key):
        assert client.post(URL, json=EVENT).status_code == 401

    def test_wrong_key_is_403(self, client, relay_api_key):
        assert client.post(URL, json=EVENT, headers={"X-API-Key": "nope"}).status_code == 403

    def test_unconfigured_key_rejects_everything(self, client):
        assert client.post(URL, json=EVENT, headers={"X-API-Key": "anything"}).status_code == 403


class TestSubscriptionEvents:
    """Tests for POST /billing/subscription-events."""

    def test_applies_event(self, client, relay_api_key, add_account, memory_store):
        add_account("user-1", stripe_customer_id="cus_1", subscription_tier="Curious Retail")

        response = client.post(URL, json=EVENT, headers={"X-API-Key": relay_api_key})

        assert response.status_code == 200
        data = response.json()
        assert data["handled"] is True
        assert data["tier"] == "Quant Edge"
        assert data["account_ids"] == ["user-1"]
        assert memory_store.accounts["user-1"].subscription_tier == "Quant Edge"

    def test_upgrade_lifts_quota(self, client, relay_api_key, add_account):
        add_account("user-1", stripe_customer_id="cus_1", subscription_tier="Curious Retail")
        headers = {"X-User-ID": "user-1"}
        for rid in ("r1", "r2", "r3"):
            client.post("/api/v1/access/decide", json={"resource_id": rid}, headers=headers)
        assert client.post(
            "/api/v1/access/decide", json={"resource_id": "r4"}, headers=headers
        ).json()["granted"] is False

        client.post(URL, json=EVENT, headers={"X-API-Key": relay_api_key})

        assert client.post(
            "/api/v1/access/decide", json={"resource_id": "r4"}, headers=headers
        ).json()["granted"] is True

    def test_ignored_event(self, client, relay_api_key):
        response = client.post(
            URL, json={"type": "invoice.paid", "data": {}}, headers={"X-API-Key": relay_api_key}
        )

        assert response.status_code == 200
        assert response.json()["handled"] is False

    def test_event_type_required(self, client, relay_api_key):
        response = client.post(URL, json={"data": {}}, headers={"X-API-Key": relay_api_key})
        assert response.status_code == 422
