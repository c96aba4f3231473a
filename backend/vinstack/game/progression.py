"""Pure bookkeeping for XP, CodeCoins and levels."""
from vinstack.game.quests import Quest

XP_PER_LEVEL = 1000
STARTING_COINS = 100


def compute_level(experience: int) -> int:
    """Level 1 covers 0-999 XP, level 2 starts at 1000, and so on."""
    return experience // XP_PER_LEVEL + 1


def quest_rewards(quest: Quest, score: int) -> tuple[int, int]:
    """(xp_gained, coins_gained) for finishing ``quest`` with ``score`` percent."""
    if not 0 <= score <= 100:
        raise ValueError(f"score must be between 0 and 100, got {score}")
    return quest.xp_reward * score // 100, quest.coin_reward * score // 100


def score_from_results(passed: int, total: int) -> int:
    if total <= 0:
        return 0
    return 100 * passed // total
