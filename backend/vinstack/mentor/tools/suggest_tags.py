"""SuggestTags tool."""
from typing import Any

from vinstack.services.tag_service import generate_tags

TOOL_SCHEMA = {
    "type": "function",
    "function": {
        "name": "SuggestTags",
        "description": "Suggest search tags for a snippet of code.",
        "parameters": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "language": {"type": "string"},
                "existing_tags": {"type": "array", "items": {"type": "string"}},
            },
            "required": ["code", "language"],
        },
    },
}


def execute(ctx, args: dict[str, Any]) -> dict[str, Any]:
    return {"tags": generate_tags(args.get("code", ""), args.get("language", ""), args.get("existing_tags") or ())}
