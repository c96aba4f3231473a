"""External tool integration routes."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.schemas.integration import IntegrationConnect, IntegrationOut
from vinstack.services import integration_service

router = APIRouter()


@router.get("/", response_model=list[IntegrationOut])
def list_integrations(user_id: str, active_only: bool = False, db: Session = Depends(get_db)):
    rows = integration_service.list_integrations(db, user_id, active_only)
    return [integration_service.integration_to_dict(row) for row in rows]


@router.post("/", response_model=IntegrationOut)
def connect_integration(payload: IntegrationConnect, db: Session = Depends(get_db)):
    """Connect a provider, or reconnect it with fresh credentials."""
    integration = integration_service.connect_integration(
        db, payload.user_id, payload.provider, payload.external_id,
        payload.access_token, payload.refresh_token, payload.config,
    )
    return integration_service.integration_to_dict(integration)


@router.post("/{integration_id}/deactivate", response_model=IntegrationOut)
def deactivate_integration(integration_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)):
    integration = integration_service.deactivate_integration(db, integration_id, actor_id)
    return integration_service.integration_to_dict(integration)


@router.post("/{integration_id}/sync", response_model=IntegrationOut)
def mark_synced(integration_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)):
    """Record that the client finished a sync with the provider."""
    integration = integration_service.mark_synced(db, integration_id, actor_id)
    return integration_service.integration_to_dict(integration)
