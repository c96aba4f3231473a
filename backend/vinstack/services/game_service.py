"""Quest progression: players, quest start/completion and hint purchases.

Completion is once per (player, quest). A repeat is refused with 409 before
anything is credited, and the unique constraint on ``quest_completions``
backs that up if two requests race.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from vinstack.game.progression import STARTING_COINS, compute_level, quest_rewards, score_from_results
from vinstack.game.quests import CheckKind, Quest, get_quest
from vinstack.models.player import Player, QuestCompletion
from vinstack.services.profile_service import get_profile_or_404, has_premium_access, record_activity
from vinstack.services.sandbox_service import CodeSandbox, ExecutionStatus

logger = logging.getLogger(__name__)


def get_quest_or_404(quest_id: str) -> Quest:
    quest = get_quest(quest_id)
    if quest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quest not found")
    return quest


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "player_id": player.player_id,
        "user_id": player.user_id,
        "level": player.level,
        "experience": player.experience,
        "code_coins": player.code_coins,
        "quests_completed": player.quests_completed,
        "total_xp": player.total_xp,
        "completed_quests": player.completed_quests,
    }


def get_or_create_player(db: Session, user_id: str) -> Player:
    player = db.query(Player).filter(Player.user_id == user_id).first()
    if player:
        return player
    get_profile_or_404(db, user_id)
    player = Player(user_id=user_id, level=1, experience=0, code_coins=STARTING_COINS)
    db.add(player)
    db.commit()
    db.refresh(player)
    logger.info("Created player %s for user %s", player.player_id, user_id)
    return player


def start_quest(db: Session, user_id: str, quest_id: str) -> Quest:
    """Check the player may attempt ``quest_id`` and return it."""
    quest = get_quest_or_404(quest_id)
    player = get_or_create_player(db, user_id)

    if quest.is_premium and not has_premium_access(db, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This quest requires a premium plan")

    missing = [q for q in quest.prerequisites if q not in player.completed_quests]
    if missing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Prerequisite quests are not completed", "missing": missing},
        )
    return quest


def complete_quest(db: Session, user_id: str, quest_id: str, score: int) -> dict[str, Any]:
    quest = start_quest(db, user_id, quest_id)
    player = get_or_create_player(db, user_id)

    if quest_id in player.completed_quests:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Quest already completed")

    try:
        xp, coins = quest_rewards(quest, score)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    old_level = player.level
    player.experience += xp
    player.total_xp += xp
    player.code_coins += coins
    player.quests_completed += 1
    # level only ever goes up
    player.level = max(player.level, compute_level(player.experience))
    completion = QuestCompletion(
        player_id=player.player_id,
        quest_id=quest_id,
        score=score,
        xp_gained=xp,
        coins_gained=coins,
    )
    db.add(completion)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Quest already completed")
    db.refresh(player)
    db.refresh(completion)

    record_activity(
        db, user_id, "complete", "quest", quest_id,
        f"Completed quest '{quest.title}'", {"score": score, "xp": xp, "coins": coins},
    )
    logger.info("User %s completed %s with score %d (+%d XP, +%d coins)", user_id, quest_id, score, xp, coins)
    return {
        "quest_id": quest_id,
        "score": score,
        "xp_gained": xp,
        "coins_gained": coins,
        "leveled_up": player.level > old_level,
        "player": player_to_dict(player),
        "completed_at": completion.completed_at,
    }


def score_submission(quest: Quest, code: str, sandbox: CodeSandbox) -> int:
    """Percentage of the quest's tests that ``code`` passes."""
    stdout: Optional[str] = None
    if quest.needs_runtime:
        result = sandbox.execute(code, quest.language.value)
        stdout = result.output if result.status == ExecutionStatus.success else ""

    passed = 0
    for test in quest.tests:
        haystack = code if test.check is CheckKind.source else stdout
        if haystack and test.expected in haystack:
            passed += 1
    return score_from_results(passed, len(quest.tests))


def submit_quest(db: Session, user_id: str, quest_id: str, code: str, sandbox: CodeSandbox) -> dict[str, Any]:
    quest = start_quest(db, user_id, quest_id)
    player = get_or_create_player(db, user_id)
    if quest_id in player.completed_quests:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Quest already completed")
    score = score_submission(quest, code, sandbox)
    return complete_quest(db, user_id, quest_id, score)


def buy_hint(db: Session, user_id: str, quest_id: str, level: int) -> dict[str, Any]:
    quest = get_quest_or_404(quest_id)
    hint = quest.hint(level)
    if hint is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Hint not found")

    player = get_or_create_player(db, user_id)
    if player.code_coins < hint.cost:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail=f"Not enough CodeCoins: hint costs {hint.cost}, balance is {player.code_coins}",
        )
    player.code_coins -= hint.cost
    db.commit()
    db.refresh(player)
    logger.info("User %s bought hint %d for %s (-%d coins)", user_id, level, quest_id, hint.cost)
    return {
        "quest_id": quest_id,
        "level": level,
        "content": hint.content,
        "cost": hint.cost,
        "code_coins": player.code_coins,
    }
