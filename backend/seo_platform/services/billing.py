"""
Subscription state driven by Stripe webhook events
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from seo_platform.models.subscription import Plan, Subscription
from seo_platform.services import stripe_client
from seo_platform.services.stripe_client import field

logger = logging.getLogger(__name__)


def _timestamp(value: Optional[int]) -> Optional[datetime]:
    return datetime.fromtimestamp(value, tz=timezone.utc) if value else None


def _subscription_price_id(stripe_subscription: Any) -> Optional[str]:
    items = field(field(stripe_subscription, "items"), "data", [])
    if not items:
        return None
    return field(field(items[0], "price"), "id")


def _period_bound(stripe_subscription: Any, key: str) -> Optional[datetime]:
    value = field(stripe_subscription, key)
    if value is None:
        # Newer API versions carry the billing period on the subscription item
        items = field(field(stripe_subscription, "items"), "data", [])
        value = field(items[0], key) if items else None
    return _timestamp(value)


def apply_stripe_subscription(subscription: Subscription, stripe_subscription: Any) -> Plan:
    """Copy plan, status and period fields from a Stripe subscription"""
    price_id = _subscription_price_id(stripe_subscription)
    plan = stripe_client.get_plan_from_price_id(price_id)

    subscription.stripe_subscription_id = field(stripe_subscription, "id")
    subscription.stripe_price_id = price_id
    subscription.plan = plan.value
    subscription.status = field(stripe_subscription, "status", "active")
    subscription.current_period_start = _period_bound(stripe_subscription, "current_period_start")
    subscription.current_period_end = _period_bound(stripe_subscription, "current_period_end")
    subscription.cancel_at_period_end = bool(field(stripe_subscription, "cancel_at_period_end", False))
    return plan


def _handle_checkout_completed(db: Session, session: Dict[str, Any]) -> None:
    if session.get("mode") != "subscription" or not session.get("customer") or not session.get("subscription"):
        return

    metadata = session.get("metadata") or {}
    workspace_id = metadata.get("workspaceId")
    user_id = metadata.get("userId")
    if not workspace_id:
        logger.error("No workspaceId in checkout session metadata")
        return

    stripe_subscription = stripe_client.retrieve_subscription(session["subscription"])

    subscription = db.query(Subscription).filter(Subscription.workspace_id == UUID(workspace_id)).first()
    if subscription is None:
        subscription = Subscription(workspace_id=UUID(workspace_id))
        db.add(subscription)

    if user_id:
        subscription.user_id = UUID(user_id)
    subscription.stripe_customer_id = session["customer"]
    plan = apply_stripe_subscription(subscription, stripe_subscription)
    db.commit()

    logger.info(f"Workspace {workspace_id} subscribed to {plan.value}")


def _handle_subscription_changed(db: Session, stripe_subscription: Dict[str, Any]) -> None:
    subscription = db.query(Subscription).filter(
        Subscription.stripe_customer_id == stripe_subscription.get("customer")
    ).first()
    if subscription is None:
        logger.warning(f"No subscription found for customer {stripe_subscription.get('customer')}")
        return

    plan = apply_stripe_subscription(subscription, stripe_subscription)
    db.commit()
    logger.info(f"Subscription for workspace {subscription.workspace_id} is now {plan.value}/{subscription.status}")


def _handle_subscription_deleted(db: Session, stripe_subscription: Dict[str, Any]) -> None:
    subscription = db.query(Subscription).filter(
        Subscription.stripe_customer_id == stripe_subscription.get("customer")
    ).first()
    if subscription is None:
        return

    subscription.plan = Plan.FREE.value
    subscription.status = "canceled"
    subscription.cancel_at_period_end = False
    db.commit()
    logger.info(f"Subscription for workspace {subscription.workspace_id} canceled")


def handle_webhook_event(db: Session, event: Dict[str, Any]) -> None:
    event_type = event.get("type")
    data_object = (event.get("data") or {}).get("object") or {}

    if event_type == "checkout.session.completed":
        _handle_checkout_completed(db, data_object)
    elif event_type in ("customer.subscription.created", "customer.subscription.updated"):
        _handle_subscription_changed(db, data_object)
    elif event_type == "customer.subscription.deleted":
        _handle_subscription_deleted(db, data_object)
    else:
        logger.info(f"Unhandled event type: {event_type}")
