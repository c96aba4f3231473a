"""AI mentor: a Think → Act → Observe loop over OpenAI tool calling.

The mentor explains quests and code, runs code for the learner and suggests
tags. It never writes to the database; quest completion stays with the game
service.
"""
import json
import logging
import time
import uuid
from typing import Any, Optional

from openai import OpenAI

from vinstack.config import settings
from vinstack.mentor.tools import ToolContext, get_quest, run_code, suggest_tags

logger = logging.getLogger(__name__)

TOOLS = {
    "GetQuest": get_quest,
    "RunCode": run_code,
    "SuggestTags": suggest_tags,
}

TOOL_SCHEMAS = [mod.TOOL_SCHEMA for mod in TOOLS.values()]

MAX_ITERATIONS = 6

SYSTEM_PROMPT = """You are the VinStack Code mentor, a patient programming coach inside a coding game.

CAPABILITIES:
- GetQuest: read a quest's goal, tests and hint levels
- RunCode: run the learner's Python or JavaScript and see the output
- SuggestTags: suggest tags for a snippet

RULES:
1. Guide, do not solve: point at the next step instead of pasting a full answer.
2. Run the learner's code before commenting on what it prints.
3. Keep answers short and encouraging.

CONTEXT:
- User ID: {user_id}
- Current quest: {quest_id}
"""

PLACEHOLDER_RESPONSE = (
    "The AI mentor isn't configured yet. Add an OpenAI API key to the backend "
    "`.env` file to enable it.\n\n"
    "In the meantime, quest hints can be bought with CodeCoins from the quest screen."
)


def run_mentor(
    ctx: ToolContext,
    user_message: str,
    quest_id: Optional[str] = None,
    code: Optional[str] = None,
    client: Optional[OpenAI] = None,
) -> dict[str, Any]:
    """Answer one learner message. Returns ``{"response", "tool_calls", "session_log"}``."""
    session_log: dict[str, Any] = {
        "session_id": str(uuid.uuid4()),
        "user_id": ctx.user_id,
        "iterations": 0,
        "total_tokens": 0,
        "latency_ms": 0,
    }
    started = time.time()

    if client is None:
        if not settings.OPENAI_API_KEY:
            logger.warning("OpenAI API key not configured, returning placeholder mentor reply")
            return {"response": PLACEHOLDER_RESPONSE, "tool_calls": [], "session_log": session_log}
        client = OpenAI(api_key=settings.OPENAI_API_KEY)

    content = user_message
    if code:
        content += f"\n\nMy current code:\n```\n{code}\n```"
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": SYSTEM_PROMPT.format(user_id=ctx.user_id, quest_id=quest_id or "none")},
        {"role": "user", "content": content},
    ]
    tool_calls: list[dict[str, Any]] = []

    for iteration in range(MAX_ITERATIONS):
        session_log["iterations"] = iteration + 1
        try:
            response = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                tools=TOOL_SCHEMAS,
                tool_choice="auto",
            )
        except Exception as exc:
            logger.error("Mentor LLM error: %s", exc)
            session_log["error"] = str(exc)
            return {
                "response": "The mentor can't reach the AI service right now. Please try again shortly.",
                "tool_calls": tool_calls,
                "session_log": session_log,
            }

        if response.usage:
            session_log["total_tokens"] += response.usage.total_tokens
        message = response.choices[0].message

        if not message.tool_calls:
            session_log["latency_ms"] = int((time.time() - started) * 1000)
            logger.info(
                "[Mentor %s] finished in %d iteration(s), %d tokens",
                session_log["session_id"], iteration + 1, session_log["total_tokens"],
            )
            return {"response": message.content or "", "tool_calls": tool_calls, "session_log": session_log}

        messages.append(message.model_dump())
        for call in message.tool_calls:
            name = call.function.name
            try:
                args = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError:
                args = {}
            record: dict[str, Any] = {"tool": name, "args": args, "result": None, "error": None}

            tool = TOOLS.get(name)
            if tool is None:
                record["error"] = f"Unknown tool: {name}"
                result: Any = {"error": record["error"]}
            else:
                try:
                    result = tool.execute(ctx, args)
                    record["result"] = result
                except Exception as exc:
                    logger.error("Mentor tool %s failed: %s", name, exc)
                    record["error"] = str(exc)
                    result = {"error": str(exc)}

            tool_calls.append(record)
            messages.append({"role": "tool", "tool_call_id": call.id, "content": json.dumps(result, default=str)})

    session_log["latency_ms"] = int((time.time() - started) * 1000)
    logger.warning("[Mentor %s] hit max iterations (%d)", session_log["session_id"], MAX_ITERATIONS)
    return {
        "response": "Let's take this one step at a time. Could you tell me which part is confusing?",
        "tool_calls": tool_calls,
        "session_log": session_log,
    }
