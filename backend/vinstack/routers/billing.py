"""Pricing plans, Stripe Checkout and Billing Portal routes."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_stripe
from vinstack.integrations.plans import PLANS, plan_for_price
from vinstack.integrations.stripe_billing import StripeBillingClient
from vinstack.models.subscription import Subscription, SubscriptionStatus
from vinstack.models.user import SubscriptionTier
from vinstack.schemas.billing import CheckoutRequest, PlanOut, PortalRequest, RedirectOut
from vinstack.services.profile_service import get_profile_or_404

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/plans", response_model=list[PlanOut])
def list_plans():
    return list(PLANS)


@router.post("/checkout", response_model=RedirectOut)
def create_checkout(
    payload: CheckoutRequest,
    db: Session = Depends(get_db),
    stripe: StripeBillingClient = Depends(get_stripe),
):
    """Open a Checkout Session and remember it as an incomplete subscription."""
    profile = get_profile_or_404(db, payload.user_id)
    plan = plan_for_price(payload.price_id)
    if plan is None:
        raise HTTPException(status_code=404, detail="Unknown price id")

    existing = (
        db.query(Subscription)
        .filter(Subscription.user_id == profile.user_id, Subscription.stripe_customer_id.isnot(None))
        .first()
    )
    session = stripe.create_checkout_session(
        payload.price_id,
        profile.user_id,
        customer_email=profile.email,
        customer_id=existing.stripe_customer_id if existing else None,
    )
    db.add(Subscription(
        user_id=profile.user_id,
        plan=SubscriptionTier(plan["plan_id"]),
        status=SubscriptionStatus.incomplete,
        checkout_session_id=session["session_id"],
        stripe_customer_id=existing.stripe_customer_id if existing else None,
    ))
    db.commit()
    return session


@router.post("/portal", response_model=RedirectOut)
def create_portal(
    payload: PortalRequest,
    db: Session = Depends(get_db),
    stripe: StripeBillingClient = Depends(get_stripe),
):
    get_profile_or_404(db, payload.user_id)
    subscription = (
        db.query(Subscription)
        .filter(Subscription.user_id == payload.user_id, Subscription.stripe_customer_id.isnot(None))
        .order_by(Subscription.created_at.desc())
        .first()
    )
    if not subscription:
        raise HTTPException(status_code=404, detail="No billing account for this user")
    return stripe.create_portal_session(subscription.stripe_customer_id)
