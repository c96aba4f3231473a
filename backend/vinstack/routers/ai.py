"""Tag suggestion and AI mentor routes."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_sandbox
from vinstack.mentor.mentor_agent import run_mentor
from vinstack.mentor.tools import ToolContext
from vinstack.schemas.ai import MentorMessage, MentorResponse, TagRequest, TagResponse
from vinstack.services.sandbox_service import CodeSandbox
from vinstack.services.tag_service import generate_tags

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/tags", response_model=TagResponse)
def suggest_tags(payload: TagRequest):
    return TagResponse(tags=generate_tags(payload.code, payload.language, payload.existing_tags))


@router.post("/mentor", response_model=MentorResponse)
def mentor_chat(
    payload: MentorMessage,
    db: Session = Depends(get_db),
    sandbox: CodeSandbox = Depends(get_sandbox),
):
    """One turn with the AI mentor."""
    ctx = ToolContext(db=db, sandbox=sandbox, user_id=payload.user_id)
    result = run_mentor(ctx, payload.message, quest_id=payload.quest_id, code=payload.code)
    session_log = result.get("session_log", {})
    logger.info(
        "Mentor session %s: %d tool calls, %d tokens, %dms",
        session_log.get("session_id", "?"),
        len(result.get("tool_calls", [])),
        session_log.get("total_tokens", 0),
        session_log.get("latency_ms", 0),
    )
    return MentorResponse(response=result["response"], tool_calls=result.get("tool_calls", []))
