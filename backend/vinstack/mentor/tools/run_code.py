"""RunCode tool: runs the learner's code in the sandbox."""
from typing import Any

TOOL_SCHEMA = {
    "type": "function",
    "function": {
        "name": "RunCode",
        "description": (
            "Execute a Python or JavaScript snippet in the sandbox and return its "
            "stdout, stderr and status. HTML and CSS are returned unchanged."
        ),
        "parameters": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "language": {"type": "string", "enum": ["python", "javascript", "html", "css"]},
            },
            "required": ["code", "language"],
        },
    },
}


def execute(ctx, args: dict[str, Any]) -> dict[str, Any]:
    return ctx.sandbox.execute(args.get("code", ""), args.get("language", "")).to_dict()
