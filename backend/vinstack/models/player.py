"""Player progression ORM models: XP, CodeCoins and completed quests."""
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from vinstack.database import Base


class Player(Base):
    __tablename__ = "players"

    player_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.user_id"), nullable=False, unique=True)
    level = Column(Integer, nullable=False, default=1)
    experience = Column(Integer, nullable=False, default=0)
    code_coins = Column(Integer, nullable=False, default=100)
    quests_completed = Column(Integer, nullable=False, default=0)
    total_xp = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    completions = relationship(
        "QuestCompletion", back_populates="player", cascade="all, delete-orphan",
        order_by="QuestCompletion.completed_at",
    )

    @property
    def completed_quests(self) -> list[str]:
        return [c.quest_id for c in self.completions]


class QuestCompletion(Base):
    __tablename__ = "quest_completions"
    __table_args__ = (UniqueConstraint("player_id", "quest_id", name="uq_quest_completion"),)

    completion_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    player_id = Column(String(36), ForeignKey("players.player_id"), nullable=False)
    quest_id = Column(String(64), nullable=False)
    score = Column(Integer, nullable=False)
    xp_gained = Column(Integer, nullable=False)
    coins_gained = Column(Integer, nullable=False)
    completed_at = Column(DateTime(timezone=True), server_default=func.now())

    player = relationship("Player", back_populates="completions")
