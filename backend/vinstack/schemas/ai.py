"""Pydantic schemas for tag suggestions and the AI mentor."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class TagRequest(BaseModel):
    code: str
    language: str
    existing_tags: list[str] = []


class TagResponse(BaseModel):
    tags: list[str]


class MentorMessage(BaseModel):
    user_id: str
    message: str
    quest_id: Optional[str] = None
    code: Optional[str] = None


class MentorResponse(BaseModel):
    response: str
    tool_calls: list[dict] = []
