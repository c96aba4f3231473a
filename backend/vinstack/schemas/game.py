"""Pydantic schemas for quests and player progression."""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class PlayerOut(BaseModel):
    player_id: str
    user_id: str
    level: int
    experience: int
    code_coins: int
    quests_completed: int
    total_xp: int
    completed_quests: list[str] = []

    model_config = {"from_attributes": True}


class HintOut(BaseModel):
    level: int
    cost: int


class QuestOut(BaseModel):
    quest_id: str
    title: str
    description: str
    difficulty: str
    language: str
    category: str
    xp_reward: int
    coin_reward: int
    starter_code: str
    prerequisites: list[str] = []
    estimated_minutes: int
    is_premium: bool
    hints: list[HintOut] = []


class QuestCompleteRequest(BaseModel):
    user_id: str
    score: int = Field(ge=0, le=100)


class QuestSubmitRequest(BaseModel):
    user_id: str
    code: str


class QuestStartRequest(BaseModel):
    user_id: str


class QuestResultOut(BaseModel):
    quest_id: str
    score: int
    xp_gained: int
    coins_gained: int
    leveled_up: bool
    player: PlayerOut
    completed_at: Optional[datetime] = None


class HintPurchaseRequest(BaseModel):
    user_id: str
    level: int


class HintPurchaseOut(BaseModel):
    quest_id: str
    level: int
    content: str
    cost: int
    code_coins: int


QuestResultOut.model_rebuild()
