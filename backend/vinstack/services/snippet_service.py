"""Snippet service: CRUD, version history, likes, views and forks.

Every write commits first and then publishes a row change on the snippet's
channel, so listeners never see an event for a row that was rolled back.

Versions are append-only: an update (or a restore) always adds a row numbered
one past the current maximum; nothing here edits or removes an old version.
"""
import difflib
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from vinstack.models.collaborator import CollaboratorRole, SnippetCollaborator
from vinstack.models.comment import SnippetComment
from vinstack.models.notification import NotificationType
from vinstack.models.snippet import Snippet, SnippetLike, SnippetVersion, SnippetView, Visibility
from vinstack.models.team import TeamMember
from vinstack.realtime.hub import ChannelHub, publish, snippet_channel
from vinstack.services import notification_service
from vinstack.services.profile_service import get_profile_or_404, record_activity

logger = logging.getLogger(__name__)

TABLE = "snippets"
POLICY_RECURSION_SQLSTATE = "42P17"


def snippet_snapshot(snippet: Snippet) -> dict[str, Any]:
    """JSON-safe row image used as the ``record`` of change events."""
    return {
        "snippet_id": snippet.snippet_id,
        "title": snippet.title,
        "language": snippet.language,
        "visibility": snippet.visibility.value if snippet.visibility else None,
        "owner_id": snippet.owner_id,
        "is_archived": snippet.is_archived,
    }


def snippet_to_dict(db: Session, snippet: Snippet) -> dict[str, Any]:
    """Full row plus like/view/comment counts."""
    data = {
        "snippet_id": snippet.snippet_id,
        "title": snippet.title,
        "description": snippet.description,
        "content": snippet.content,
        "language": snippet.language,
        "tags": list(snippet.tags or []),
        "visibility": snippet.visibility.value,
        "owner_id": snippet.owner_id,
        "folder_id": snippet.folder_id,
        "team_id": snippet.team_id,
        "is_archived": snippet.is_archived,
        "custom_fields": dict(snippet.custom_fields or {}),
        "created_at": snippet.created_at,
        "updated_at": snippet.updated_at,
    }
    data.update(snippet_counts(db, snippet.snippet_id))
    return data


def snippet_counts(db: Session, snippet_id: str) -> dict[str, int]:
    return {
        "like_count": db.query(SnippetLike).filter(SnippetLike.snippet_id == snippet_id).count(),
        "view_count": db.query(SnippetView).filter(SnippetView.snippet_id == snippet_id).count(),
        "comment_count": db.query(SnippetComment).filter(SnippetComment.snippet_id == snippet_id).count(),
    }


def get_snippet_or_404(db: Session, snippet_id: str) -> Snippet:
    snippet = db.query(Snippet).filter(Snippet.snippet_id == snippet_id).first()
    if not snippet:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snippet not found")
    return snippet


def _accepted_role(db: Session, snippet_id: str, user_id: str) -> Optional[CollaboratorRole]:
    collab = (
        db.query(SnippetCollaborator)
        .filter(
            SnippetCollaborator.snippet_id == snippet_id,
            SnippetCollaborator.user_id == user_id,
            SnippetCollaborator.accepted_at.isnot(None),
        )
        .first()
    )
    return collab.role if collab else None


def can_edit(db: Session, snippet: Snippet, user_id: Optional[str]) -> bool:
    if not user_id:
        return False
    if snippet.owner_id == user_id:
        return True
    return _accepted_role(db, snippet.snippet_id, user_id) in (CollaboratorRole.owner, CollaboratorRole.editor)


def can_view(db: Session, snippet: Snippet, user_id: Optional[str]) -> bool:
    if snippet.visibility == Visibility.public:
        return True
    if not user_id:
        return False
    if snippet.owner_id == user_id or _accepted_role(db, snippet.snippet_id, user_id) is not None:
        return True
    if snippet.visibility == Visibility.team and snippet.team_id:
        member = (
            db.query(TeamMember)
            .filter(TeamMember.team_id == snippet.team_id, TeamMember.user_id == user_id)
            .first()
        )
        return member is not None
    return False


def can_comment(db: Session, snippet: Snippet, user_id: Optional[str]) -> bool:
    """Owner and accepted owner/editor/commenter collaborators; viewers only read."""
    if not user_id:
        return False
    if snippet.owner_id == user_id:
        return True
    return _accepted_role(db, snippet.snippet_id, user_id) in (
        CollaboratorRole.owner, CollaboratorRole.editor, CollaboratorRole.commenter,
    )


def get_viewable_snippet(db: Session, snippet_id: str, viewer_id: Optional[str]) -> Snippet:
    """404 for a missing snippet, 403 when ``viewer_id`` may not see it."""
    snippet = get_snippet_or_404(db, snippet_id)
    if not can_view(db, snippet, viewer_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Snippet is not visible to this user")
    return snippet


def _next_version_number(db: Session, snippet_id: str) -> int:
    current = (
        db.query(func.max(SnippetVersion.version_number))
        .filter(SnippetVersion.snippet_id == snippet_id)
        .scalar()
    )
    return (current or 0) + 1


def _append_version(db: Session, snippet: Snippet, author_id: Optional[str], message: str) -> SnippetVersion:
    version = SnippetVersion(
        snippet_id=snippet.snippet_id,
        version_number=_next_version_number(db, snippet.snippet_id),
        title=snippet.title,
        description=snippet.description,
        content=snippet.content,
        change_message=message,
        author_id=author_id,
    )
    db.add(version)
    return version


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------

def create_snippet(db: Session, hub: Optional[ChannelHub], **fields: Any) -> Snippet:
    """Insert a snippet together with version 1."""
    get_profile_or_404(db, fields["owner_id"], detail="Owner not found")
    visibility = Visibility(fields.pop("visibility", Visibility.private))
    snippet = Snippet(visibility=visibility, **fields)
    db.add(snippet)
    db.flush()
    _append_version(db, snippet, snippet.owner_id, "Initial version")
    db.commit()
    db.refresh(snippet)

    publish(hub, snippet_channel(snippet.snippet_id), TABLE, "INSERT", snippet_snapshot(snippet))
    record_activity(
        db, snippet.owner_id, "create", "snippet", snippet.snippet_id,
        f"Created snippet '{snippet.title}'", {"language": snippet.language},
    )
    logger.info("Created snippet %s (%s) for user %s", snippet.snippet_id, snippet.language, snippet.owner_id)
    return snippet


def update_snippet(
    db: Session,
    hub: Optional[ChannelHub],
    snippet_id: str,
    actor_id: str,
    changes: dict[str, Any],
) -> Snippet:
    """Apply ``changes`` and append a new version. Owner or accepted editor only."""
    snippet = get_snippet_or_404(db, snippet_id)
    if not can_edit(db, snippet, actor_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the owner or an editor may modify this snippet",
        )

    changes = dict(changes)
    message = changes.pop("change_message", None) or "Updated snippet"
    if "visibility" in changes and changes["visibility"] is not None:
        changes["visibility"] = Visibility(changes["visibility"])
    for key, value in changes.items():
        if value is not None:
            setattr(snippet, key, value)

    _append_version(db, snippet, actor_id, message)
    db.commit()
    db.refresh(snippet)

    publish(hub, snippet_channel(snippet_id), TABLE, "UPDATE", snippet_snapshot(snippet))
    logger.info("Updated snippet %s by %s (%s)", snippet_id, actor_id, message)
    return snippet


def delete_snippet(db: Session, hub: Optional[ChannelHub], snippet_id: str, actor_id: str) -> None:
    snippet = get_snippet_or_404(db, snippet_id)
    if snippet.owner_id != actor_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner may delete this snippet")

    record = snippet_snapshot(snippet)
    # replies point at their parents, so detach before the bulk delete
    comments = db.query(SnippetComment).filter(SnippetComment.snippet_id == snippet_id)
    comments.update({SnippetComment.parent_id: None}, synchronize_session=False)
    comments.delete(synchronize_session=False)
    db.delete(snippet)
    db.commit()

    publish(hub, snippet_channel(snippet_id), TABLE, "DELETE", record)
    logger.info("Deleted snippet %s by %s", snippet_id, actor_id)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def is_policy_recursion_error(exc: DBAPIError) -> bool:
    """True for the recursive row-policy failure on the snippets table."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == POLICY_RECURSION_SQLSTATE:
        return True
    return "infinite recursion" in str(orig if orig is not None else exc).lower()


def _apply_filters(query, filters: dict[str, Any]):
    query = query.filter(Snippet.is_archived.is_(False))
    if filters.get("visibility"):
        query = query.filter(Snippet.visibility == Visibility(filters["visibility"]))
    if filters.get("language"):
        query = query.filter(Snippet.language == filters["language"])
    if filters.get("owner_id"):
        query = query.filter(Snippet.owner_id == filters["owner_id"])
    if filters.get("search"):
        pattern = f"%{filters['search']}%"
        query = query.filter(or_(Snippet.title.ilike(pattern), Snippet.description.ilike(pattern)))
    return query.order_by(Snippet.created_at.desc())


def _visible_snippets(db: Session, viewer_id: Optional[str], filters: dict[str, Any]) -> list[Snippet]:
    conditions = [Snippet.visibility == Visibility.public]
    if viewer_id:
        shared = (
            db.query(SnippetCollaborator.snippet_id)
            .filter(SnippetCollaborator.user_id == viewer_id, SnippetCollaborator.accepted_at.isnot(None))
        )
        teams = db.query(TeamMember.team_id).filter(TeamMember.user_id == viewer_id)
        conditions += [
            Snippet.owner_id == viewer_id,
            Snippet.snippet_id.in_(shared),
            (Snippet.visibility == Visibility.team) & Snippet.team_id.in_(teams),
        ]
    return _apply_filters(db.query(Snippet).filter(or_(*conditions)), filters).all()


def _owned_snippets(db: Session, viewer_id: Optional[str], filters: dict[str, Any]) -> list[Snippet]:
    if not viewer_id:
        return []
    return _apply_filters(db.query(Snippet).filter(Snippet.owner_id == viewer_id), filters).all()


def _matches_tags(snippet: Snippet, tags: list[str]) -> bool:
    return bool(set(snippet.tags or []) & set(tags))


def list_snippets(db: Session, viewer_id: Optional[str] = None, **filters: Any) -> list[Snippet]:
    """Snippets the viewer may see, newest first.

    When the visibility query trips the recursive-policy error the session is
    rolled back and only the viewer's own snippets are returned. Any other
    database error propagates.
    """
    try:
        snippets = _visible_snippets(db, viewer_id, filters)
    except DBAPIError as exc:
        if not is_policy_recursion_error(exc):
            raise
        db.rollback()
        logger.warning(
            "Snippet visibility query hit a recursive policy, falling back to owned snippets for %s",
            viewer_id,
        )
        snippets = _owned_snippets(db, viewer_id, filters)

    tags = filters.get("tags")
    if tags:
        snippets = [s for s in snippets if _matches_tags(s, tags)]
    return snippets


# ---------------------------------------------------------------------------
# Engagement
# ---------------------------------------------------------------------------

def toggle_like(db: Session, hub: Optional[ChannelHub], snippet_id: str, user_id: str) -> tuple[bool, int]:
    """Like or unlike. Returns ``(liked, like_count)``."""
    snippet = get_snippet_or_404(db, snippet_id)
    get_profile_or_404(db, user_id)
    existing = (
        db.query(SnippetLike)
        .filter(SnippetLike.snippet_id == snippet_id, SnippetLike.user_id == user_id)
        .first()
    )
    if existing:
        db.delete(existing)
        liked = False
    else:
        db.add(SnippetLike(snippet_id=snippet_id, user_id=user_id))
        liked = True
    db.commit()

    count = db.query(SnippetLike).filter(SnippetLike.snippet_id == snippet_id).count()
    publish(
        hub, snippet_channel(snippet_id), "snippet_likes", "INSERT" if liked else "DELETE",
        {"snippet_id": snippet_id, "user_id": user_id},
    )
    if liked and snippet.owner_id != user_id:
        notification_service.notify(
            db, hub, snippet.owner_id, NotificationType.like,
            "New like", f"Someone liked '{snippet.title}'",
            {"snippet_id": snippet_id, "user_id": user_id},
        )
    return liked, count


def record_view(db: Session, snippet_id: str, user_id: Optional[str] = None) -> SnippetView:
    get_snippet_or_404(db, snippet_id)
    view = SnippetView(snippet_id=snippet_id, user_id=user_id)
    db.add(view)
    db.commit()
    db.refresh(view)
    return view


def fork_snippet(db: Session, hub: Optional[ChannelHub], snippet_id: str, user_id: str) -> Snippet:
    """Copy a viewable snippet into a private snippet owned by ``user_id``."""
    source = get_snippet_or_404(db, snippet_id)
    if not can_view(db, source, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Snippet is not visible to this user")

    custom_fields = dict(source.custom_fields or {})
    custom_fields["forked_from"] = source.snippet_id
    fork = create_snippet(
        db, hub,
        title=f"{source.title} (Fork)",
        description=source.description,
        content=source.content,
        language=source.language,
        tags=list(source.tags or []),
        visibility=Visibility.private,
        owner_id=user_id,
        custom_fields=custom_fields,
    )
    if source.owner_id != user_id:
        notification_service.notify(
            db, hub, source.owner_id, NotificationType.fork,
            "Snippet forked", f"'{source.title}' was forked",
            {"snippet_id": source.snippet_id, "fork_id": fork.snippet_id, "user_id": user_id},
        )
    return fork


# ---------------------------------------------------------------------------
# Versions
# ---------------------------------------------------------------------------

def list_versions(db: Session, snippet_id: str, viewer_id: Optional[str] = None) -> list[SnippetVersion]:
    get_viewable_snippet(db, snippet_id, viewer_id)
    return (
        db.query(SnippetVersion)
        .filter(SnippetVersion.snippet_id == snippet_id)
        .order_by(SnippetVersion.version_number.desc())
        .all()
    )


def _get_version_or_404(db: Session, snippet_id: str, version_number: int) -> SnippetVersion:
    version = (
        db.query(SnippetVersion)
        .filter(SnippetVersion.snippet_id == snippet_id, SnippetVersion.version_number == version_number)
        .first()
    )
    if not version:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Version {version_number} not found")
    return version


def compare_versions(
    db: Session,
    snippet_id: str,
    from_version: int,
    to_version: int,
    viewer_id: Optional[str] = None,
) -> dict[str, Any]:
    """Unified diff of the content of ``from_version`` against ``to_version``."""
    get_viewable_snippet(db, snippet_id, viewer_id)
    old = _get_version_or_404(db, snippet_id, from_version)
    new = _get_version_or_404(db, snippet_id, to_version)

    lines = list(difflib.unified_diff(
        (old.content or "").splitlines(keepends=True),
        (new.content or "").splitlines(keepends=True),
        fromfile=f"v{from_version}",
        tofile=f"v{to_version}",
    ))
    # the two file header lines also start with +/-
    body = lines[2:]
    return {
        "snippet_id": snippet_id,
        "from_version": from_version,
        "to_version": to_version,
        "diff": "".join(line if line.endswith("\n") else line + "\n" for line in lines),
        "additions": sum(1 for line in body if line.startswith("+")),
        "deletions": sum(1 for line in body if line.startswith("-")),
    }


def restore_version(
    db: Session,
    hub: Optional[ChannelHub],
    snippet_id: str,
    version_number: int,
    actor_id: str,
) -> Snippet:
    """Bring back an old version's content as a brand-new version."""
    version = _get_version_or_404(db, snippet_id, version_number)
    return update_snippet(
        db, hub, snippet_id, actor_id,
        {
            "title": version.title,
            "description": version.description,
            "content": version.content,
            "change_message": f"Restored version {version_number}",
        },
    )


def attach_video(db: Session, hub: Optional[ChannelHub], snippet_id: str, actor_id: str, video_url: str) -> Snippet:
    """Save a generated explainer video URL into ``custom_fields.video_url``."""
    snippet = get_snippet_or_404(db, snippet_id)
    if not can_edit(db, snippet, actor_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner or an editor may attach media")
    custom_fields = dict(snippet.custom_fields or {})
    custom_fields["video_url"] = video_url
    custom_fields["video_generated_at"] = datetime.now(timezone.utc).isoformat()
    snippet.custom_fields = custom_fields
    db.commit()
    db.refresh(snippet)
    publish(hub, snippet_channel(snippet_id), TABLE, "UPDATE", snippet_snapshot(snippet))
    return snippet
