"""Snippet comment API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_hub
from vinstack.realtime.hub import ChannelHub
from vinstack.schemas.comment import CommentCreate, CommentNode, CommentOut, CommentUpdate
from vinstack.services import comment_service

router = APIRouter()


@router.get("/snippets/{snippet_id}/comments", response_model=list[CommentNode])
def list_comments(
    snippet_id: str, flat: bool = False, viewer_id: Optional[str] = None, db: Session = Depends(get_db),
):
    """Threaded by default. ``flat=true`` returns every row in creation order with empty ``replies``."""
    return comment_service.list_comments(db, snippet_id, threaded=not flat, viewer_id=viewer_id)


@router.post("/snippets/{snippet_id}/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(
    snippet_id: str,
    payload: CommentCreate,
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    """Owner and accepted owner/editor/commenter collaborators only."""
    return comment_service.add_comment(
        db, hub, snippet_id, payload.author_id, payload.content, payload.parent_id, payload.line_number,
    )


@router.patch("/comments/{comment_id}", response_model=CommentOut)
def update_comment(
    comment_id: str,
    payload: CommentUpdate,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    return comment_service.update_comment(db, hub, comment_id, actor_id, payload.content)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: str,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    comment_service.delete_comment(db, hub, comment_id, actor_id)


@router.post("/comments/{comment_id}/resolve", response_model=CommentOut)
def resolve_comment(
    comment_id: str,
    actor_id: str = Query(...),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    return comment_service.resolve_comment(db, hub, comment_id, actor_id)
