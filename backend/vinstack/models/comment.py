"""SnippetComment ORM model: threading is stored only as parent_id."""
import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from vinstack.database import Base


class SnippetComment(Base):
    __tablename__ = "snippet_comments"

    comment_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    snippet_id = Column(String(36), ForeignKey("snippets.snippet_id"), nullable=False)
    author_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False)
    parent_id = Column(String(36), ForeignKey("snippet_comments.comment_id"), nullable=True)
    content = Column(Text, nullable=False)
    line_number = Column(Integer, nullable=True)
    is_resolved = Column(Boolean, nullable=False, default=False)
    resolved_by = Column(String(36), ForeignKey("profiles.user_id"), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
