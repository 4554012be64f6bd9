"""Tests for subscription endpoints and Stripe webhook handling"""

import hashlib
import hmac
import json
import time

import pytest

from seo_platform.core.config import settings
from seo_platform.models.admin_log import AdminLog
from seo_platform.models.subscription import Plan, Subscription
from seo_platform.models.user import User
from seo_platform.services import stripe_client
from seo_platform.services.billing import apply_stripe_subscription

API = "/api/v1"
WEBHOOK_SECRET = "whsec_test"


@pytest.fixture
def stripe_settings(monkeypatch):
    monkeypatch.setattr(settings, "STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr(settings, "STRIPE_PRO_PRICE_ID", "price_pro")
    monkeypatch.setattr(settings, "STRIPE_AGENCY_PRICE_ID", "price_agency")


def _owner_subscription(db) -> Subscription:
    db.expire_all()
    owner = db.query(User).filter(User.email == "owner@example.com").one()
    return db.query(Subscription).filter(Subscription.user_id == owner.id).one()


def _signed(event: dict, secret: str = WEBHOOK_SECRET):
    payload = json.dumps(event)
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return payload, {"stripe-signature": f"t={timestamp},v1={signature}", "content-type": "application/json"}


def _subscription_event(event_type: str, customer: str = "cus_123", price: str = "price_pro", status: str = "active"):
    return {
        "id": "evt_1",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": "sub_1",
                "object": "subscription",
                "customer": customer,
                "status": status,
                "cancel_at_period_end": False,
                "items": {
                    "data": [{
                        "price": {"id": price},
                        "current_period_start": 1760000000,
                        "current_period_end": 1762592000,
                    }],
                },
            },
        },
    }


class TestSubscription:

    def test_new_workspace_is_free(self, client, owner_headers):
        data = client.get(f"{API}/subscription", headers=owner_headers).json()

        assert data["plan"] == "FREE"
        assert data["effective_plan"] == "FREE"
        assert data["status"] == "active"
        assert data["limits"]["max_projects"] == 2
        assert data["definition"]["name"] == "Free"

    def test_lapsed_paid_plan_is_treated_as_free(self, client, owner_headers, set_plan):
        set_plan("owner@example.com", "AGENCY", status="past_due")

        data = client.get(f"{API}/subscription", headers=owner_headers).json()

        assert data["plan"] == "AGENCY"
        assert data["effective_plan"] == "FREE"
        assert data["limits"]["integrations_allowed"] is False


class TestCheckout:

    def test_not_configured(self, client, owner_headers):
        response = client.post(f"{API}/billing/checkout", json={"plan": "PRO"}, headers=owner_headers)

        assert response.status_code == 503
        assert response.json()["detail"] == {"error": "Feature not configured", "missingKey": "STRIPE_SECRET_KEY"}

    def test_free_is_not_purchasable(self, client, owner_headers, stripe_settings):
        response = client.post(f"{API}/billing/checkout", json={"plan": "FREE"}, headers=owner_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid plan tier"

    def test_missing_price(self, client, owner_headers, stripe_settings, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_AGENCY_PRICE_ID", None)

        response = client.post(f"{API}/billing/checkout", json={"plan": "AGENCY"}, headers=owner_headers)

        assert response.status_code == 500

    def test_creates_customer_then_session(self, client, owner_headers, stripe_settings, monkeypatch, db):
        calls = {}

        def fake_customer(email, name, workspace_id):
            calls["customer"] = (email, name)
            return "cus_new"

        def fake_session(**kwargs):
            calls["session"] = kwargs
            return "https://checkout.stripe.test/c/pay"

        monkeypatch.setattr(stripe_client, "create_customer", fake_customer)
        monkeypatch.setattr(stripe_client, "create_checkout_session", fake_session)

        response = client.post(f"{API}/billing/checkout", json={"plan": "PRO"}, headers=owner_headers)

        assert response.json() == {"url": "https://checkout.stripe.test/c/pay"}
        assert calls["customer"] == ("owner@example.com", "Olive Owner")
        assert calls["session"]["customer_id"] == "cus_new"
        assert calls["session"]["price_id"] == "price_pro"
        assert calls["session"]["success_url"].endswith("/billing?success=true")
        assert _owner_subscription(db).stripe_customer_id == "cus_new"

    def test_stripe_failure(self, client, owner_headers, stripe_settings, monkeypatch):
        def failing(email, name, workspace_id):
            raise stripe_client.StripeError("card network down")

        monkeypatch.setattr(stripe_client, "create_customer", failing)

        response = client.post(f"{API}/billing/checkout", json={"plan": "PRO"}, headers=owner_headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to create checkout session"

    def test_members_cannot_check_out(self, client, owner_headers, register, workspace_id, stripe_settings):
        member = register("member@example.com")
        client.post(f"{API}/workspace/members", json={"email": "member@example.com", "role": "ADMIN"},
                    headers=owner_headers)

        response = client.post(f"{API}/billing/checkout", json={"plan": "PRO"},
                               headers={**member, "X-Workspace-Id": workspace_id})

        assert response.status_code == 403

    def test_portal_without_customer(self, client, owner_headers, stripe_settings):
        response = client.post(f"{API}/billing/portal", headers=owner_headers)

        assert response.status_code == 404
        assert response.json()["detail"] == "No active subscription found"


class TestWebhook:

    @pytest.fixture
    def customer(self, owner_headers, db):
        subscription = _owner_subscription(db)
        subscription.stripe_customer_id = "cus_123"
        db.commit()
        return subscription

    def test_missing_signature(self, client, stripe_settings, db):
        response = client.post(f"{API}/billing/webhook", content=b"{}")

        assert response.status_code == 400
        assert response.json()["detail"] == "No signature provided"
        log = db.query(AdminLog).filter(AdminLog.action == "STRIPE_WEBHOOK_INVALID_SIGNATURE").one()
        assert log.level == "SECURITY"

    def test_bad_signature(self, client, stripe_settings):
        payload, headers = _signed(_subscription_event("customer.subscription.updated"), secret="whsec_wrong")

        response = client.post(f"{API}/billing/webhook", content=payload, headers=headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid signature"

    def test_webhook_secret_missing(self, client, stripe_settings, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", None)
        payload, headers = _signed(_subscription_event("customer.subscription.updated"))

        response = client.post(f"{API}/billing/webhook", content=payload, headers=headers)

        assert response.status_code == 500
        assert response.json()["detail"] == "Webhook secret not configured"

    def test_subscription_updated(self, client, owner_headers, customer, stripe_settings, db):
        payload, headers = _signed(_subscription_event("customer.subscription.updated"))

        response = client.post(f"{API}/billing/webhook", content=payload, headers=headers)

        assert response.json() == {"received": True}
        subscription = _owner_subscription(db)
        assert subscription.plan == "PRO"
        assert subscription.stripe_subscription_id == "sub_1"
        assert subscription.current_period_end is not None
        assert client.get(f"{API}/subscription", headers=owner_headers).json()["effective_plan"] == "PRO"

    def test_subscription_deleted(self, client, customer, stripe_settings, db):
        payload, headers = _signed(_subscription_event("customer.subscription.deleted"))

        client.post(f"{API}/billing/webhook", content=payload, headers=headers)

        subscription = _owner_subscription(db)
        assert (subscription.plan, subscription.status) == ("FREE", "canceled")

    def test_checkout_completed(self, client, owner_headers, workspace_id, stripe_settings, monkeypatch, db):
        monkeypatch.setattr(
            stripe_client,
            "retrieve_subscription",
            lambda subscription_id: _subscription_event("x", price="price_agency")["data"]["object"],
        )
        event = {
            "id": "evt_2",
            "object": "event",
            "type": "checkout.session.completed",
            "data": {"object": {
                "mode": "subscription",
                "customer": "cus_999",
                "subscription": "sub_1",
                "metadata": {"workspaceId": workspace_id},
            }},
        }
        payload, headers = _signed(event)

        client.post(f"{API}/billing/webhook", content=payload, headers=headers)

        subscription = _owner_subscription(db)
        assert subscription.plan == "AGENCY"
        assert subscription.stripe_customer_id == "cus_999"

    def test_unknown_customer_is_ignored(self, client, stripe_settings):
        payload, headers = _signed(_subscription_event("customer.subscription.updated", customer="cus_unknown"))

        assert client.post(f"{API}/billing/webhook", content=payload, headers=headers).json() == {"received": True}


class TestApplyStripeSubscription:

    def test_prefers_subscription_level_period(self, stripe_settings):
        subscription = Subscription()
        stripe_subscription = _subscription_event("x")["data"]["object"]
        stripe_subscription["current_period_end"] = 1770000000

        plan = apply_stripe_subscription(subscription, stripe_subscription)

        assert plan == Plan.PRO
        assert subscription.current_period_end.timestamp() == 1770000000
        assert subscription.current_period_start.timestamp() == 1760000000

    def test_unknown_price_maps_to_free(self, stripe_settings):
        subscription = Subscription()

        plan = apply_stripe_subscription(subscription, _subscription_event("x", price="price_legacy")["data"]["object"])

        assert plan == Plan.FREE
        assert subscription.status == "active"
