"""Snippet collaborator API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_hub
from vinstack.realtime.hub import ChannelHub
from vinstack.schemas.collaborator import CollaboratorInvite, CollaboratorOut, CollaboratorRoleUpdate
from vinstack.services import collaboration_service

router = APIRouter()


@router.get("/{snippet_id}/collaborators", response_model=list[CollaboratorOut])
def list_collaborators(
    snippet_id: str,
    accepted_only: bool = False,
    viewer_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """The roster, for anyone who can see the snippet."""
    return collaboration_service.list_collaborators(db, snippet_id, accepted_only, viewer_id)


@router.post(
    "/{snippet_id}/collaborators", response_model=CollaboratorOut, status_code=status.HTTP_201_CREATED,
)
def invite_collaborator(
    snippet_id: str,
    payload: CollaboratorInvite,
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    """Invite a registered user by email. The invitee is notified."""
    return collaboration_service.invite_collaborator(
        db, hub, snippet_id, payload.email, payload.role, payload.invited_by,
    )


@router.post("/{snippet_id}/collaborators/{user_id}/accept", response_model=CollaboratorOut)
def accept_invitation(
    snippet_id: str, user_id: str, db: Session = Depends(get_db), hub: ChannelHub = Depends(get_hub),
):
    return collaboration_service.accept_invitation(db, hub, snippet_id, user_id)


@router.patch("/{snippet_id}/collaborators/{user_id}", response_model=CollaboratorOut)
def update_role(
    snippet_id: str,
    user_id: str,
    payload: CollaboratorRoleUpdate,
    actor_id: str = Query(..., description="Must be the snippet owner"),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    return collaboration_service.update_role(db, hub, snippet_id, user_id, payload.role, actor_id)


@router.delete("/{snippet_id}/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_collaborator(
    snippet_id: str,
    user_id: str,
    actor_id: str = Query(..., description="The snippet owner, or the collaborator leaving"),
    db: Session = Depends(get_db),
    hub: ChannelHub = Depends(get_hub),
):
    collaboration_service.remove_collaborator(db, hub, snippet_id, user_id, actor_id)
