"""Quest and player progression API routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_sandbox
from vinstack.game.quests import QUESTS, Quest
from vinstack.schemas.game import (
    HintOut, HintPurchaseOut, HintPurchaseRequest, PlayerOut, QuestCompleteRequest, QuestOut,
    QuestResultOut, QuestStartRequest, QuestSubmitRequest,
)
from vinstack.services import game_service
from vinstack.services.sandbox_service import CodeSandbox

router = APIRouter()


def _quest_out(quest: Quest) -> QuestOut:
    return QuestOut(
        quest_id=quest.quest_id,
        title=quest.title,
        description=quest.description,
        difficulty=quest.difficulty.value,
        language=quest.language.value,
        category=quest.category,
        xp_reward=quest.xp_reward,
        coin_reward=quest.coin_reward,
        starter_code=quest.starter_code,
        prerequisites=list(quest.prerequisites),
        estimated_minutes=quest.estimated_minutes,
        is_premium=quest.is_premium,
        hints=[HintOut(level=h.level, cost=h.cost) for h in quest.hints],
    )


@router.get("/quests", response_model=list[QuestOut])
def list_quests():
    return [_quest_out(q) for q in QUESTS]


@router.get("/quests/{quest_id}", response_model=QuestOut)
def get_quest(quest_id: str):
    return _quest_out(game_service.get_quest_or_404(quest_id))


@router.get("/players/{user_id}", response_model=PlayerOut)
def get_player(user_id: str, db: Session = Depends(get_db)):
    """The user's player record, created with starting coins on first access."""
    return game_service.player_to_dict(game_service.get_or_create_player(db, user_id))


@router.post("/quests/{quest_id}/start", response_model=QuestOut)
def start_quest(quest_id: str, payload: QuestStartRequest, db: Session = Depends(get_db)):
    return _quest_out(game_service.start_quest(db, payload.user_id, quest_id))


@router.post("/quests/{quest_id}/complete", response_model=QuestResultOut)
def complete_quest(quest_id: str, payload: QuestCompleteRequest, db: Session = Depends(get_db)):
    return game_service.complete_quest(db, payload.user_id, quest_id, payload.score)


@router.post("/quests/{quest_id}/submit", response_model=QuestResultOut)
def submit_quest(
    quest_id: str,
    payload: QuestSubmitRequest,
    db: Session = Depends(get_db),
    sandbox: CodeSandbox = Depends(get_sandbox),
):
    """Score submitted code against the quest's tests, then complete the quest."""
    return game_service.submit_quest(db, payload.user_id, quest_id, payload.code, sandbox)


@router.post("/quests/{quest_id}/hints", response_model=HintPurchaseOut)
def buy_hint(quest_id: str, payload: HintPurchaseRequest, db: Session = Depends(get_db)):
    return game_service.buy_hint(db, payload.user_id, quest_id, payload.level)
