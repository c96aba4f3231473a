"""Integration ORM model: a user's link to an external developer tool."""
import enum
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from vinstack.database import Base


class IntegrationProvider(str, enum.Enum):
    github = "github"
    gitlab = "gitlab"
    bitbucket = "bitbucket"
    vscode = "vscode"
    slack = "slack"


class Integration(Base):
    __tablename__ = "integrations"
    __table_args__ = (UniqueConstraint("user_id", "provider", name="uq_integration_user_provider"),)

    integration_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False, index=True)
    provider = Column(SAEnum(IntegrationProvider), nullable=False)
    external_id = Column(String(255), nullable=False)
    # credentials are write-only through the API
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    config = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    last_sync_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
