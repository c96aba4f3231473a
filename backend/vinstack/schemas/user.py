"""Pydantic schemas for Profiles."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, EmailStr


class ProfileCreate(BaseModel):
    username: str
    email: EmailStr
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    preferred_languages: list[str] = []


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    preferred_languages: Optional[list[str]] = None


class ProfileOut(BaseModel):
    user_id: str
    username: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    preferred_languages: list[str] = []
    subscription_tier: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityOut(BaseModel):
    activity_id: str
    user_id: str
    type: str
    entity_type: str
    entity_id: str
    description: str
    details: dict = {}
    created_at: datetime

    model_config = {"from_attributes": True}
