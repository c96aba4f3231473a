"""Snippet collaborators: invitations, roles and the accepted roster."""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from vinstack.models.collaborator import CollaboratorRole, SnippetCollaborator
from vinstack.models.notification import NotificationType
from vinstack.models.user import Profile
from vinstack.realtime.hub import ChannelHub, publish, snippet_channel
from vinstack.services import notification_service
from vinstack.services.snippet_service import get_snippet_or_404, get_viewable_snippet

logger = logging.getLogger(__name__)

TABLE = "snippet_collaborators"


def _snapshot(collab: SnippetCollaborator) -> dict[str, Any]:
    return {
        "collaborator_id": collab.collaborator_id,
        "snippet_id": collab.snippet_id,
        "user_id": collab.user_id,
        "role": collab.role.value,
        "accepted": collab.accepted_at is not None,
    }


def collaborator_to_dict(collab: SnippetCollaborator, profile: Optional[Profile]) -> dict[str, Any]:
    data = _snapshot(collab)
    data.pop("accepted")
    data.update({
        "username": profile.username if profile else None,
        "avatar_url": profile.avatar_url if profile else None,
        "invited_by": collab.invited_by,
        "invited_at": collab.invited_at,
        "accepted_at": collab.accepted_at,
    })
    return data


def _get_or_404(db: Session, snippet_id: str, user_id: str) -> SnippetCollaborator:
    collab = (
        db.query(SnippetCollaborator)
        .filter(SnippetCollaborator.snippet_id == snippet_id, SnippetCollaborator.user_id == user_id)
        .first()
    )
    if not collab:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Collaborator not found")
    return collab


def list_collaborators(
    db: Session, snippet_id: str, accepted_only: bool = False, viewer_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    """Collaborators joined with their profile's username and avatar."""
    get_viewable_snippet(db, snippet_id, viewer_id)
    query = (
        db.query(SnippetCollaborator, Profile)
        .outerjoin(Profile, Profile.user_id == SnippetCollaborator.user_id)
        .filter(SnippetCollaborator.snippet_id == snippet_id)
    )
    if accepted_only:
        query = query.filter(SnippetCollaborator.accepted_at.isnot(None))
    rows = query.order_by(SnippetCollaborator.invited_at).all()
    return [collaborator_to_dict(collab, profile) for collab, profile in rows]


def invite_collaborator(
    db: Session,
    hub: Optional[ChannelHub],
    snippet_id: str,
    email: str,
    role: str,
    invited_by: str,
) -> dict[str, Any]:
    snippet = get_snippet_or_404(db, snippet_id)
    if snippet.owner_id != invited_by:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner may invite collaborators")

    invitee = db.query(Profile).filter(Profile.email == email).first()
    if not invitee:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if invitee.user_id == snippet.owner_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The owner is already a collaborator")

    existing = (
        db.query(SnippetCollaborator)
        .filter(SnippetCollaborator.snippet_id == snippet_id, SnippetCollaborator.user_id == invitee.user_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a collaborator")

    collab = SnippetCollaborator(
        snippet_id=snippet_id,
        user_id=invitee.user_id,
        role=CollaboratorRole(role),
        invited_by=invited_by,
    )
    db.add(collab)
    db.commit()
    db.refresh(collab)

    publish(hub, snippet_channel(snippet_id), TABLE, "INSERT", _snapshot(collab))
    notification_service.notify(
        db, hub, invitee.user_id, NotificationType.collaboration,
        "Collaboration invite", f"You were invited to collaborate on '{snippet.title}' as {role}",
        {"snippet_id": snippet_id, "role": role, "invited_by": invited_by},
    )
    logger.info("Invited %s to snippet %s as %s", invitee.user_id, snippet_id, role)
    return collaborator_to_dict(collab, invitee)


def accept_invitation(db: Session, hub: Optional[ChannelHub], snippet_id: str, user_id: str) -> dict[str, Any]:
    collab = _get_or_404(db, snippet_id, user_id)
    if collab.accepted_at is None:
        collab.accepted_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(collab)
        publish(hub, snippet_channel(snippet_id), TABLE, "UPDATE", _snapshot(collab))
        logger.info("User %s accepted collaboration on snippet %s", user_id, snippet_id)
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    return collaborator_to_dict(collab, profile)


def update_role(
    db: Session, hub: Optional[ChannelHub], snippet_id: str, user_id: str, role: str, actor_id: str,
) -> dict[str, Any]:
    snippet = get_snippet_or_404(db, snippet_id)
    if snippet.owner_id != actor_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the owner may change roles")
    collab = _get_or_404(db, snippet_id, user_id)
    collab.role = CollaboratorRole(role)
    db.commit()
    db.refresh(collab)
    publish(hub, snippet_channel(snippet_id), TABLE, "UPDATE", _snapshot(collab))
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    return collaborator_to_dict(collab, profile)


def remove_collaborator(
    db: Session, hub: Optional[ChannelHub], snippet_id: str, user_id: str, actor_id: str,
) -> None:
    """The owner removes anyone; a collaborator may only remove themselves."""
    snippet = get_snippet_or_404(db, snippet_id)
    if actor_id not in (snippet.owner_id, user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to remove this collaborator")
    collab = _get_or_404(db, snippet_id, user_id)
    record = _snapshot(collab)
    db.delete(collab)
    db.commit()
    publish(hub, snippet_channel(snippet_id), TABLE, "DELETE", record)
    logger.info("Removed collaborator %s from snippet %s by %s", user_id, snippet_id, actor_id)
