"""Folder ORM model: owner-scoped grouping of snippets."""
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from vinstack.database import Base


class Folder(Base):
    __tablename__ = "folders"

    folder_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    parent_id = Column(String(36), ForeignKey("folders.folder_id"), nullable=True)
    owner_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
