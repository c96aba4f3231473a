"""Profile API routes."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.models.activity import Activity
from vinstack.models.user import Profile
from vinstack.schemas.user import ActivityOut, ProfileCreate, ProfileOut, ProfileUpdate
from vinstack.services.profile_service import get_profile_or_404

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ProfileOut, status_code=status.HTTP_201_CREATED)
def create_profile(payload: ProfileCreate, db: Session = Depends(get_db)):
    """Register a profile. Username and email are unique."""
    taken = (
        db.query(Profile)
        .filter(or_(Profile.username == payload.username, Profile.email == payload.email))
        .first()
    )
    if taken:
        raise HTTPException(status_code=409, detail="Username or email is already registered")
    profile = Profile(**payload.model_dump())
    db.add(profile)
    db.commit()
    db.refresh(profile)
    logger.info("Created profile %s (%s)", profile.user_id, profile.username)
    return profile


@router.get("/", response_model=list[ProfileOut])
def list_profiles(db: Session = Depends(get_db)):
    return db.query(Profile).order_by(Profile.username).all()


@router.get("/{user_id}", response_model=ProfileOut)
def get_profile(user_id: str, db: Session = Depends(get_db)):
    return get_profile_or_404(db, user_id)


@router.patch("/{user_id}", response_model=ProfileOut)
def update_profile(user_id: str, payload: ProfileUpdate, db: Session = Depends(get_db)):
    """Partial update of the editable profile fields."""
    profile = get_profile_or_404(db, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("username") and changes["username"] != profile.username:
        if db.query(Profile).filter(Profile.username == changes["username"]).first():
            raise HTTPException(status_code=409, detail="Username is already taken")
    for field, value in changes.items():
        setattr(profile, field, value)
    db.commit()
    db.refresh(profile)
    logger.info("Updated profile %s", user_id)
    return profile


@router.get("/{user_id}/activities", response_model=list[ActivityOut])
def list_activities(user_id: str, limit: int = 50, db: Session = Depends(get_db)):
    """The user's activity feed, newest first."""
    get_profile_or_404(db, user_id)
    return (
        db.query(Activity)
        .filter(Activity.user_id == user_id)
        .order_by(Activity.created_at.desc())
        .limit(limit)
        .all()
    )
