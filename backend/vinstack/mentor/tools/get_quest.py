"""GetQuest tool: quest details plus whether the player may start it."""
from typing import Any

from vinstack.game.quests import get_quest
from vinstack.models.player import Player

TOOL_SCHEMA = {
    "type": "function",
    "function": {
        "name": "GetQuest",
        "description": (
            "Look up a coding quest: its goal, language, tests, prerequisites and "
            "the hint levels available. Use it before explaining what a quest asks for."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "quest_id": {"type": "string", "description": "Quest id, e.g. intro-variables"},
            },
            "required": ["quest_id"],
        },
    },
}


def execute(ctx, args: dict[str, Any]) -> dict[str, Any]:
    quest = get_quest(args.get("quest_id", ""))
    if quest is None:
        return {"error": f"Unknown quest: {args.get('quest_id')}"}

    completed: list[str] = []
    if ctx.user_id:
        player = ctx.db.query(Player).filter(Player.user_id == ctx.user_id).first()
        completed = player.completed_quests if player else []

    return {
        "quest_id": quest.quest_id,
        "title": quest.title,
        "description": quest.description,
        "language": quest.language.value,
        "difficulty": quest.difficulty.value,
        # hidden tests stay hidden from the learner
        "tests": [t.description for t in quest.tests if not t.is_hidden],
        "prerequisites": list(quest.prerequisites),
        "missing_prerequisites": [q for q in quest.prerequisites if q not in completed],
        "already_completed": quest.quest_id in completed,
        "hint_levels": [{"level": h.level, "cost": h.cost} for h in quest.hints],
    }
