"""Snippet comments. Threading is derived on read from ``parent_id``."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from vinstack.models.comment import SnippetComment
from vinstack.models.notification import NotificationType
from vinstack.realtime.hub import ChannelHub, publish, snippet_channel
from vinstack.services import notification_service
from vinstack.services.comment_tree import build_comment_tree
from vinstack.services.profile_service import get_profile_or_404
from vinstack.services.snippet_service import can_comment, get_snippet_or_404, get_viewable_snippet

logger = logging.getLogger(__name__)

TABLE = "snippet_comments"


def comment_to_dict(comment: SnippetComment) -> dict[str, Any]:
    return {
        "comment_id": comment.comment_id,
        "snippet_id": comment.snippet_id,
        "author_id": comment.author_id,
        "parent_id": comment.parent_id,
        "content": comment.content,
        "line_number": comment.line_number,
        "is_resolved": comment.is_resolved,
        "resolved_by": comment.resolved_by,
        "resolved_at": comment.resolved_at,
        "created_at": comment.created_at,
    }


def _record(comment: SnippetComment) -> dict[str, Any]:
    return {
        "comment_id": comment.comment_id,
        "snippet_id": comment.snippet_id,
        "author_id": comment.author_id,
        "parent_id": comment.parent_id,
    }


def _get_or_404(db: Session, comment_id: str) -> SnippetComment:
    comment = db.query(SnippetComment).filter(SnippetComment.comment_id == comment_id).first()
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


def list_comments(
    db: Session, snippet_id: str, threaded: bool = True, viewer_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    get_viewable_snippet(db, snippet_id, viewer_id)
    rows = (
        db.query(SnippetComment)
        .filter(SnippetComment.snippet_id == snippet_id)
        .order_by(SnippetComment.created_at)
        .all()
    )
    flat = [comment_to_dict(c) for c in rows]
    return build_comment_tree(flat) if threaded else flat


def add_comment(
    db: Session,
    hub: Optional[ChannelHub],
    snippet_id: str,
    author_id: str,
    content: str,
    parent_id: Optional[str] = None,
    line_number: Optional[int] = None,
) -> SnippetComment:
    snippet = get_snippet_or_404(db, snippet_id)
    author = get_profile_or_404(db, author_id, detail="Author not found")
    if not can_comment(db, snippet, author_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to comment on this snippet")
    if parent_id:
        parent = _get_or_404(db, parent_id)
        if parent.snippet_id != snippet_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Parent comment belongs to another snippet")

    comment = SnippetComment(
        snippet_id=snippet_id,
        author_id=author_id,
        parent_id=parent_id,
        content=content,
        line_number=line_number,
    )
    db.add(comment)
    db.commit()
    db.refresh(comment)

    publish(hub, snippet_channel(snippet_id), TABLE, "INSERT", _record(comment))
    if snippet.owner_id != author_id:
        notification_service.notify(
            db, hub, snippet.owner_id, NotificationType.comment,
            "New comment", f"{author.username} commented on '{snippet.title}'",
            {"snippet_id": snippet_id, "comment_id": comment.comment_id},
        )
    logger.info("Comment %s added to snippet %s by %s", comment.comment_id, snippet_id, author_id)
    return comment


def update_comment(db: Session, hub: Optional[ChannelHub], comment_id: str, actor_id: str, content: str) -> SnippetComment:
    comment = _get_or_404(db, comment_id)
    if comment.author_id != actor_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the author may edit this comment")
    comment.content = content
    db.commit()
    db.refresh(comment)
    publish(hub, snippet_channel(comment.snippet_id), TABLE, "UPDATE", _record(comment))
    return comment


def _descendant_ids(db: Session, comment: SnippetComment) -> list[str]:
    rows = (
        db.query(SnippetComment.comment_id, SnippetComment.parent_id)
        .filter(SnippetComment.snippet_id == comment.snippet_id)
        .all()
    )
    children: dict[str, list[str]] = {}
    for cid, pid in rows:
        if pid:
            children.setdefault(pid, []).append(cid)
    found, stack = [], [comment.comment_id]
    while stack:
        for child in children.get(stack.pop(), []):
            found.append(child)
            stack.append(child)
    return found


def delete_comment(db: Session, hub: Optional[ChannelHub], comment_id: str, actor_id: str) -> None:
    """Delete a comment and all of its replies. Author or snippet owner only."""
    comment = _get_or_404(db, comment_id)
    snippet = get_snippet_or_404(db, comment.snippet_id)
    if actor_id not in (comment.author_id, snippet.owner_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to delete this comment")

    record = _record(comment)
    doomed = _descendant_ids(db, comment) + [comment.comment_id]
    rows = db.query(SnippetComment).filter(SnippetComment.comment_id.in_(doomed))
    rows.update({SnippetComment.parent_id: None}, synchronize_session=False)
    rows.delete(synchronize_session=False)
    db.commit()

    publish(hub, snippet_channel(record["snippet_id"]), TABLE, "DELETE", record)
    logger.info("Deleted comment %s (%d row(s)) by %s", comment_id, len(doomed), actor_id)


def resolve_comment(db: Session, hub: Optional[ChannelHub], comment_id: str, actor_id: str) -> SnippetComment:
    comment = _get_or_404(db, comment_id)
    snippet = get_snippet_or_404(db, comment.snippet_id)
    if not can_comment(db, snippet, actor_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to resolve this comment")
    if not comment.is_resolved:
        comment.is_resolved = True
        comment.resolved_by = actor_id
        comment.resolved_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(comment)
        publish(hub, snippet_channel(comment.snippet_id), TABLE, "UPDATE", _record(comment))
    return comment
