"""SnippetCollaborator ORM model: a role granted on one snippet."""
import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from vinstack.database import Base


class CollaboratorRole(str, enum.Enum):
    owner = "owner"
    editor = "editor"
    commenter = "commenter"
    viewer = "viewer"


class SnippetCollaborator(Base):
    __tablename__ = "snippet_collaborators"
    __table_args__ = (UniqueConstraint("snippet_id", "user_id", name="uq_snippet_collaborator"),)

    collaborator_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    snippet_id = Column(String(36), ForeignKey("snippets.snippet_id"), nullable=False)
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False)
    role = Column(SAEnum(CollaboratorRole), nullable=False, default=CollaboratorRole.viewer)
    invited_by = Column(String(36), ForeignKey("profiles.user_id"), nullable=True)
    invited_at = Column(DateTime(timezone=True), server_default=func.now())
    accepted_at = Column(DateTime(timezone=True), nullable=True)
