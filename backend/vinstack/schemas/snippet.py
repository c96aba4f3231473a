"""Pydantic schemas for Snippets and their versions."""
from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

VisibilityName = Literal["public", "private", "team"]


class SnippetCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    content: str = ""
    language: str
    tags: list[str] = []
    visibility: VisibilityName = "private"
    owner_id: str
    folder_id: Optional[str] = None
    team_id: Optional[str] = None
    custom_fields: dict = {}


class SnippetUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    language: Optional[str] = None
    tags: Optional[list[str]] = None
    visibility: Optional[VisibilityName] = None
    folder_id: Optional[str] = None
    team_id: Optional[str] = None
    is_archived: Optional[bool] = None
    custom_fields: Optional[dict] = None
    change_message: Optional[str] = None


class SnippetOut(BaseModel):
    snippet_id: str
    title: str
    description: Optional[str] = None
    content: str
    language: str
    tags: list[str] = []
    visibility: str
    owner_id: str
    folder_id: Optional[str] = None
    team_id: Optional[str] = None
    is_archived: bool
    custom_fields: dict = {}
    created_at: datetime
    updated_at: datetime
    like_count: int = 0
    view_count: int = 0
    comment_count: int = 0

    model_config = {"from_attributes": True}


class SnippetVersionOut(BaseModel):
    version_id: str
    snippet_id: str
    version_number: int
    title: str
    description: Optional[str] = None
    content: str
    change_message: Optional[str] = None
    author_id: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class VersionCompareOut(BaseModel):
    snippet_id: str
    from_version: int
    to_version: int
    diff: str
    additions: int
    deletions: int


class LikeToggleOut(BaseModel):
    liked: bool
    like_count: int


class FolderCreate(BaseModel):
    name: str
    owner_id: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_public: bool = False


class FolderOut(BaseModel):
    folder_id: str
    name: str
    owner_id: str
    description: Optional[str] = None
    parent_id: Optional[str] = None
    is_public: bool
    created_at: datetime

    model_config = {"from_attributes": True}
