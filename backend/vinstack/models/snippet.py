"""Snippet ORM models: snippets, their append-only versions, likes and views."""
import enum
import uuid
from sqlalchemy import (
    Column, String, Text, Integer, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint,
    Enum as SAEnum,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from vinstack.database import Base


class Visibility(str, enum.Enum):
    public = "public"
    private = "private"
    team = "team"


class Snippet(Base):
    __tablename__ = "snippets"

    snippet_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=False, default="")
    language = Column(String(50), nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    visibility = Column(SAEnum(Visibility), nullable=False, default=Visibility.private)
    owner_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False)
    folder_id = Column(String(36), ForeignKey("folders.folder_id"), nullable=True)
    team_id = Column(String(36), ForeignKey("teams.team_id"), nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    custom_fields = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    versions = relationship(
        "SnippetVersion", back_populates="snippet", cascade="all, delete-orphan",
        order_by="SnippetVersion.version_number",
    )
    likes = relationship("SnippetLike", cascade="all, delete-orphan")
    views = relationship("SnippetView", cascade="all, delete-orphan")
    collaborators = relationship("SnippetCollaborator", cascade="all, delete-orphan")


class SnippetVersion(Base):
    __tablename__ = "snippet_versions"
    __table_args__ = (UniqueConstraint("snippet_id", "version_number", name="uq_snippet_version"),)

    version_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    snippet_id = Column(String(36), ForeignKey("snippets.snippet_id"), nullable=False)
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    change_message = Column(String(500), nullable=True)
    author_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    snippet = relationship("Snippet", back_populates="versions")


class SnippetLike(Base):
    __tablename__ = "snippet_likes"
    __table_args__ = (UniqueConstraint("snippet_id", "user_id", name="uq_snippet_like"),)

    like_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    snippet_id = Column(String(36), ForeignKey("snippets.snippet_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class SnippetView(Base):
    __tablename__ = "snippet_views"

    view_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    snippet_id = Column(String(36), ForeignKey("snippets.snippet_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=True)
    viewed_at = Column(DateTime(timezone=True), server_default=func.now())
