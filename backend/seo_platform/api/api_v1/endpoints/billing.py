"""
Subscription and Stripe billing endpoints
"""

from fastapi import APIRouter, HTTPException, Depends, Request, status
from sqlalchemy.orm import Session
import logging

from seo_platform.api.deps import get_current_user, get_current_workspace, require_workspace_owner
from seo_platform.core.config import settings
from seo_platform.core.database import get_db
from seo_platform.models.subscription import Plan, Subscription
from seo_platform.models.user import User
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.billing import CheckoutRequest
from seo_platform.services import rbac, stripe_client
from seo_platform.services.admin_logger import log_security_event
from seo_platform.services.billing import handle_webhook_event
from seo_platform.services.plan_limits import get_limits_for_plan, get_workspace_plan
from seo_platform.services.stripe_client import (
    StripeError,
    StripeNotConfiguredError,
    StripeSignatureError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _not_configured(missing_key: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error": "Feature not configured", "missingKey": missing_key},
    )


def _workspace_subscription(db: Session, workspace: Workspace) -> Subscription:
    subscription = db.query(Subscription).filter(Subscription.workspace_id == workspace.id).first()
    if subscription is None:
        subscription = Subscription(workspace_id=workspace.id, user_id=workspace.owner_id,
                                    plan=Plan.FREE.value, status="inactive")
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
    return subscription


@router.get("/subscription")
async def get_subscription(
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """Workspace plan, billing status and the limits that apply"""
    subscription = _workspace_subscription(db, workspace)
    plan = get_workspace_plan(db, workspace.id)

    return {
        "plan": subscription.plan,
        "effective_plan": plan.value,
        "status": subscription.status,
        "current_period_end": subscription.current_period_end.isoformat() if subscription.current_period_end else None,
        "cancel_at_period_end": subscription.cancel_at_period_end,
        "stripe_customer_id": subscription.stripe_customer_id,
        "limits": get_limits_for_plan(plan).model_dump(),
        "definition": stripe_client.PLAN_DEFINITIONS[plan].model_dump(mode="json"),
    }


@router.post("/billing/checkout")
async def create_checkout(
    payload: CheckoutRequest,
    user: User = Depends(get_current_user),
    workspace: Workspace = Depends(get_current_workspace),
    context: rbac.PermissionContext = Depends(require_workspace_owner),
    db: Session = Depends(get_db),
):
    """
    Start a Stripe checkout for PRO or AGENCY (workspace owner only)
    """
    if not stripe_client.is_configured():
        raise _not_configured("STRIPE_SECRET_KEY")
    if payload.plan == Plan.FREE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan tier")

    price_id = stripe_client.get_price_id_for_plan(payload.plan)
    if not price_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Price ID not configured for this plan",
        )

    subscription = _workspace_subscription(db, workspace)

    try:
        if not subscription.stripe_customer_id:
            subscription.stripe_customer_id = stripe_client.create_customer(user.email, user.name, workspace.id)
            db.commit()

        url = stripe_client.create_checkout_session(
            customer_id=subscription.stripe_customer_id,
            price_id=price_id,
            workspace_id=workspace.id,
            user_id=user.id,
            success_url=f"{settings.APP_BASE_URL}/billing?success=true",
            cancel_url=f"{settings.APP_BASE_URL}/billing?canceled=true",
        )
    except StripeError as e:
        logger.error(f"Checkout failed for workspace {workspace.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create checkout session",
        )

    return {"url": url}


@router.post("/billing/portal")
async def create_portal(
    workspace: Workspace = Depends(get_current_workspace),
    context: rbac.PermissionContext = Depends(require_workspace_owner),
    db: Session = Depends(get_db),
):
    if not stripe_client.is_configured():
        raise _not_configured("STRIPE_SECRET_KEY")

    subscription = db.query(Subscription).filter(Subscription.workspace_id == workspace.id).first()
    if not subscription or not subscription.stripe_customer_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active subscription found")

    try:
        url = stripe_client.create_billing_portal_session(
            subscription.stripe_customer_id,
            return_url=f"{settings.APP_BASE_URL}/billing",
        )
    except StripeError as e:
        logger.error(f"Portal session failed for workspace {workspace.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create portal session",
        )

    return {"url": url}


@router.post("/billing/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Receive Stripe events; the Stripe-Signature header must verify against
    the raw body
    """
    if not stripe_client.is_configured():
        raise _not_configured("STRIPE_SECRET_KEY")

    payload = await request.body()

    try:
        event = stripe_client.construct_webhook_event(payload, request.headers.get("stripe-signature"))
    except StripeNotConfiguredError as e:
        logger.error(f"{e.missing_key} is not set")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook secret not configured")
    except StripeSignatureError as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        log_security_event(db, "STRIPE_WEBHOOK_INVALID_SIGNATURE", None, {"reason": str(e)}, request)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        handle_webhook_event(db, event)
    except Exception as e:
        db.rollback()
        logger.error(f"Error processing webhook {event.get('type')}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook processing failed")

    return {"received": True}
