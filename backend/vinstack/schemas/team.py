"""Pydantic schemas for Teams."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel


class TeamCreate(BaseModel):
    name: str
    owner_id: str
    description: Optional[str] = None
    is_public: bool = False


class TeamOut(BaseModel):
    team_id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    is_public: bool
    created_at: datetime
    members: list[TeamMemberOut] = []

    model_config = {"from_attributes": True}


class TeamMemberAdd(BaseModel):
    user_id: str
    role: Literal["admin", "member", "viewer"] = "member"


class TeamMemberOut(BaseModel):
    user_id: str
    role: str
    joined_at: datetime

    model_config = {"from_attributes": True}


TeamOut.model_rebuild()
