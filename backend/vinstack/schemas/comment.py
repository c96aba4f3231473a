"""Pydantic schemas for snippet comments."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    author_id: str
    content: str = Field(min_length=1)
    parent_id: Optional[str] = None
    line_number: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1)


class CommentOut(BaseModel):
    comment_id: str
    snippet_id: str
    author_id: str
    parent_id: Optional[str] = None
    content: str
    line_number: Optional[int] = None
    is_resolved: bool
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentNode(CommentOut):
    replies: list[CommentNode] = []


CommentNode.model_rebuild()
