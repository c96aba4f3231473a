"""Pydantic schemas for snippet collaborators."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr

InvitableRole = Literal["editor", "commenter", "viewer"]


class CollaboratorInvite(BaseModel):
    email: EmailStr
    role: InvitableRole = "viewer"
    invited_by: str


class CollaboratorRoleUpdate(BaseModel):
    role: InvitableRole


class CollaboratorOut(BaseModel):
    collaborator_id: str
    snippet_id: str
    user_id: str
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    role: str
    invited_by: Optional[str] = None
    invited_at: datetime
    accepted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
