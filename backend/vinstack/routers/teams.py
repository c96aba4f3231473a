"""Team API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.schemas.team import TeamCreate, TeamMemberAdd, TeamMemberOut, TeamOut
from vinstack.services import team_service

router = APIRouter()


@router.post("/", response_model=TeamOut, status_code=status.HTTP_201_CREATED)
def create_team(payload: TeamCreate, db: Session = Depends(get_db)):
    """Create a team. The creator is added as owner."""
    return team_service.create_team(db, payload.name, payload.owner_id, payload.description, payload.is_public)


@router.get("/", response_model=list[TeamOut])
def list_teams(user_id: Optional[str] = None, db: Session = Depends(get_db)):
    return team_service.list_teams(db, user_id)


@router.get("/{team_id}", response_model=TeamOut)
def get_team(team_id: str, db: Session = Depends(get_db)):
    return team_service.get_team_or_404(db, team_id)


@router.post("/{team_id}/members", response_model=TeamMemberOut, status_code=status.HTTP_201_CREATED)
def add_member(team_id: str, payload: TeamMemberAdd, db: Session = Depends(get_db)):
    return team_service.add_member(db, team_id, payload.user_id, payload.role)


@router.delete("/{team_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(team_id: str, user_id: str, db: Session = Depends(get_db)):
    team_service.remove_member(db, team_id, user_id)
