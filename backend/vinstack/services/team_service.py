"""Teams and their membership."""
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from vinstack.models.team import Team, TeamMember, TeamRole
from vinstack.services.profile_service import get_profile_or_404

logger = logging.getLogger(__name__)


def get_team_or_404(db: Session, team_id: str) -> Team:
    team = db.query(Team).filter(Team.team_id == team_id).first()
    if not team:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


def create_team(db: Session, name: str, owner_id: str, description=None, is_public: bool = False) -> Team:
    """Create a team. The creator joins as its owner."""
    get_profile_or_404(db, owner_id, detail="Owner not found")
    team = Team(name=name, description=description, owner_id=owner_id, is_public=is_public)
    db.add(team)
    db.flush()
    db.add(TeamMember(team_id=team.team_id, user_id=owner_id, role=TeamRole.owner))
    db.commit()
    db.refresh(team)
    logger.info("Created team '%s' (%s) by user %s", team.name, team.team_id, owner_id)
    return team


def list_teams(db: Session, user_id=None) -> list[Team]:
    query = db.query(Team)
    if user_id:
        query = query.join(TeamMember).filter(TeamMember.user_id == user_id)
    return query.order_by(Team.created_at).all()


def add_member(db: Session, team_id: str, user_id: str, role: str) -> TeamMember:
    get_team_or_404(db, team_id)
    get_profile_or_404(db, user_id)
    existing = (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        .first()
    )
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member of this team")
    member = TeamMember(team_id=team_id, user_id=user_id, role=TeamRole(role))
    db.add(member)
    db.commit()
    db.refresh(member)
    logger.info("Added user %s to team %s as %s", user_id, team_id, role)
    return member


def remove_member(db: Session, team_id: str, user_id: str) -> None:
    team = get_team_or_404(db, team_id)
    if team.owner_id == user_id:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="The team owner cannot be removed")
    member = (
        db.query(TeamMember)
        .filter(TeamMember.team_id == team_id, TeamMember.user_id == user_id)
        .first()
    )
    if not member:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Membership not found")
    db.delete(member)
    db.commit()
    logger.info("Removed user %s from team %s", user_id, team_id)
