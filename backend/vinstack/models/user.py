"""Profile ORM model: one row per registered account."""
import enum
import uuid
from sqlalchemy import Column, String, Text, DateTime, JSON, Enum as SAEnum
from sqlalchemy.sql import func
from vinstack.database import Base


class SubscriptionTier(str, enum.Enum):
    free = "free"
    pro = "pro"
    team = "team"


class Profile(Base):
    __tablename__ = "profiles"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(150), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    bio = Column(Text, nullable=True)
    preferred_languages = Column(JSON, nullable=False, default=list)
    subscription_tier = Column(SAEnum(SubscriptionTier), nullable=False, default=SubscriptionTier.free)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
