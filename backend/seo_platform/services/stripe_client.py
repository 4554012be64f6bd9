"""
Stripe billing client and plan catalogue
"""

import json
import logging
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

import stripe
from pydantic import BaseModel

from seo_platform.core.config import settings
from seo_platform.models.subscription import Plan

logger = logging.getLogger(__name__)


class StripeError(Exception):
    """Stripe call failed"""
    pass


class StripeNotConfiguredError(StripeError):
    """A required Stripe setting is missing"""

    def __init__(self, missing_key: str):
        self.missing_key = missing_key
        super().__init__(f"Feature not configured: {missing_key}")


class StripeSignatureError(StripeError):
    """Webhook payload failed signature verification"""
    pass


class PlanDefinition(BaseModel):
    tier: Plan
    name: str
    description: str
    monthly_price_display: int
    stripe_price_id: Optional[str] = None
    features: List[str]


PLAN_DEFINITIONS = {
    Plan.FREE: PlanDefinition(
        tier=Plan.FREE,
        name="Free",
        description="Perfect for testing and small projects",
        monthly_price_display=0,
        features=[
            "2 projects",
            "10 keywords per project",
            "3 content briefs per project",
            "3 SEO audits per week",
            "Basic reporting",
        ],
    ),
    Plan.PRO: PlanDefinition(
        tier=Plan.PRO,
        name="Pro",
        description="For serious SEO professionals",
        monthly_price_display=39,
        stripe_price_id=settings.STRIPE_PRO_PRICE_ID,
        features=[
            "10 projects",
            "100 keywords per project",
            "20 content briefs per project",
            "10 SEO audits per week",
            "Advanced reporting",
            "API integrations",
            "Priority support",
        ],
    ),
    Plan.AGENCY: PlanDefinition(
        tier=Plan.AGENCY,
        name="Agency",
        description="For agencies managing multiple clients",
        monthly_price_display=149,
        stripe_price_id=settings.STRIPE_AGENCY_PRICE_ID,
        features=[
            "Unlimited projects",
            "Unlimited keywords",
            "Unlimited content briefs",
            "Unlimited SEO audits",
            "Custom reporting",
            "Multiple integrations",
            "Dedicated support",
            "White-label options",
        ],
    ),
}


def get_plan_from_price_id(price_id: Optional[str]) -> Plan:
    if not price_id:
        return Plan.FREE
    if price_id == settings.STRIPE_PRO_PRICE_ID:
        return Plan.PRO
    if price_id == settings.STRIPE_AGENCY_PRICE_ID:
        return Plan.AGENCY
    return Plan.FREE


def get_price_id_for_plan(plan: Union[Plan, str]) -> Optional[str]:
    if Plan(plan) == Plan.PRO:
        return settings.STRIPE_PRO_PRICE_ID
    if Plan(plan) == Plan.AGENCY:
        return settings.STRIPE_AGENCY_PRICE_ID
    return None


def is_configured() -> bool:
    return bool(settings.STRIPE_SECRET_KEY)


def _api_key() -> str:
    if not settings.STRIPE_SECRET_KEY:
        raise StripeNotConfiguredError("STRIPE_SECRET_KEY")
    return settings.STRIPE_SECRET_KEY


def field(obj: Any, key: str, default: Any = None) -> Any:
    """Read a key from a Stripe object or plain dict"""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


def create_customer(email: str, name: Optional[str], workspace_id: UUID) -> str:
    try:
        customer = stripe.Customer.create(
            api_key=_api_key(),
            email=email,
            name=name or None,
            metadata={"workspaceId": str(workspace_id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe customer creation failed for {email}: {e}")
        raise StripeError(f"Failed to create customer: {e}") from e
    return field(customer, "id")


def create_checkout_session(
    customer_id: str,
    price_id: str,
    workspace_id: UUID,
    user_id: UUID,
    success_url: str,
    cancel_url: str,
) -> str:
    """Start a subscription checkout and return its hosted URL"""
    try:
        session = stripe.checkout.Session.create(
            api_key=_api_key(),
            mode="subscription",
            customer=customer_id,
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=success_url,
            cancel_url=cancel_url,
            metadata={"userId": str(user_id), "workspaceId": str(workspace_id)},
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe checkout creation failed for workspace {workspace_id}: {e}")
        raise StripeError(f"Failed to create checkout session: {e}") from e
    return field(session, "url")


def create_billing_portal_session(customer_id: str, return_url: str) -> str:
    try:
        session = stripe.billing_portal.Session.create(
            api_key=_api_key(),
            customer=customer_id,
            return_url=return_url,
        )
    except stripe.StripeError as e:
        logger.error(f"Stripe portal session failed for customer {customer_id}: {e}")
        raise StripeError(f"Failed to create portal session: {e}") from e
    return field(session, "url")


def retrieve_subscription(subscription_id: str) -> Any:
    try:
        return stripe.Subscription.retrieve(subscription_id, api_key=_api_key())
    except stripe.StripeError as e:
        logger.error(f"Stripe subscription lookup failed for {subscription_id}: {e}")
        raise StripeError(f"Failed to retrieve subscription: {e}") from e


def construct_webhook_event(payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
    """
    Verify the Stripe-Signature header and return the event as a plain dict

    Raises StripeSignatureError on a missing or bad signature, and
    StripeNotConfiguredError when the webhook secret is not set.
    """
    if not signature:
        raise StripeSignatureError("No signature provided")
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise StripeNotConfiguredError("STRIPE_WEBHOOK_SECRET")

    try:
        stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=settings.STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise StripeSignatureError("Invalid signature") from e

    return json.loads(payload)
