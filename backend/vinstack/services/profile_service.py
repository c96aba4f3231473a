"""Profile lookups and the per-user activity feed."""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from vinstack.models.activity import Activity
from vinstack.models.subscription import Subscription, SubscriptionStatus
from vinstack.models.user import Profile, SubscriptionTier

logger = logging.getLogger(__name__)


def get_profile_or_404(db: Session, user_id: str, detail: str = "User not found") -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return profile


def has_premium_access(db: Session, user_id: str) -> bool:
    """Paid tier on the profile, or an active paid subscription row."""
    profile = get_profile_or_404(db, user_id)
    if profile.subscription_tier != SubscriptionTier.free:
        return True
    active = (
        db.query(Subscription)
        .filter(
            Subscription.user_id == user_id,
            Subscription.status == SubscriptionStatus.active,
            Subscription.plan != SubscriptionTier.free,
        )
        .first()
    )
    return active is not None


def record_activity(
    db: Session,
    user_id: str,
    activity_type: str,
    entity_type: str,
    entity_id: str,
    description: str,
    details: Optional[dict[str, Any]] = None,
) -> Optional[Activity]:
    """Append to the activity feed. Failures are logged, never raised."""
    try:
        activity = Activity(
            user_id=user_id,
            type=activity_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            details=details or {},
        )
        db.add(activity)
        db.commit()
        db.refresh(activity)
        return activity
    except Exception as exc:
        db.rollback()
        logger.error("Could not record %s activity for user %s: %s", activity_type, user_id, exc)
        return None
