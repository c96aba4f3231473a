"""Pydantic schemas for notifications."""
from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class NotificationOut(BaseModel):
    notification_id: str
    user_id: str
    type: str
    title: str
    message: str
    data: dict = {}
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UnreadCountOut(BaseModel):
    unread_count: int


class MarkAllReadOut(BaseModel):
    updated: int
