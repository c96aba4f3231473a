"""Pydantic schemas for external tool integrations."""
from __future__ import annotations
from datetime import datetime
from typing import Any, Literal, Optional
from pydantic import BaseModel, Field

Provider = Literal["github", "gitlab", "bitbucket", "vscode", "slack"]


class IntegrationConnect(BaseModel):
    user_id: str
    provider: Provider
    external_id: str = Field(..., min_length=1, max_length=255)
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    config: dict[str, Any] = Field(default_factory=dict)


class IntegrationOut(BaseModel):
    """Tokens are never echoed back; ``has_access_token`` says whether one is stored."""
    integration_id: str
    user_id: str
    provider: str
    external_id: str
    config: dict[str, Any]
    is_active: bool
    has_access_token: bool
    last_sync_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
