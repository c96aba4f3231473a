"""Links between a user and external developer tools (GitHub, GitLab, Slack...).

There is at most one row per user and provider. Connecting again replaces the
credentials and reactivates the row; disconnecting keeps the row for its
history but drops the stored tokens.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from vinstack.models.integration import Integration, IntegrationProvider
from vinstack.services.profile_service import get_profile_or_404, record_activity

logger = logging.getLogger(__name__)


def integration_to_dict(integration: Integration) -> dict[str, Any]:
    return {
        "integration_id": integration.integration_id,
        "user_id": integration.user_id,
        "provider": integration.provider.value,
        "external_id": integration.external_id,
        "config": integration.config or {},
        "is_active": integration.is_active,
        "has_access_token": bool(integration.access_token),
        "last_sync_at": integration.last_sync_at,
        "created_at": integration.created_at,
        "updated_at": integration.updated_at,
    }


def _get_owned_or_404(db: Session, integration_id: str, actor_id: str) -> Integration:
    integration = db.query(Integration).filter(Integration.integration_id == integration_id).first()
    if not integration:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Integration not found")
    if integration.user_id != actor_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your integration")
    return integration


def list_integrations(db: Session, user_id: str, active_only: bool = False) -> list[Integration]:
    get_profile_or_404(db, user_id)
    query = db.query(Integration).filter(Integration.user_id == user_id)
    if active_only:
        query = query.filter(Integration.is_active.is_(True))
    return query.order_by(Integration.created_at).all()


def connect_integration(
    db: Session,
    user_id: str,
    provider: str,
    external_id: str,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    config: Optional[dict[str, Any]] = None,
) -> Integration:
    get_profile_or_404(db, user_id)
    kind = IntegrationProvider(provider)
    options = dict(config or {})
    options.setdefault("connected_at", datetime.now(timezone.utc).isoformat())

    integration = (
        db.query(Integration)
        .filter(Integration.user_id == user_id, Integration.provider == kind)
        .first()
    )
    if integration is None:
        integration = Integration(user_id=user_id, provider=kind)
        db.add(integration)
    integration.external_id = external_id
    integration.access_token = access_token
    integration.refresh_token = refresh_token
    integration.config = options
    integration.is_active = True
    db.commit()
    db.refresh(integration)

    record_activity(
        db, user_id, "connect", "integration", integration.integration_id,
        f"Connected {kind.value}", {"provider": kind.value},
    )
    logger.info("User %s connected %s (%s)", user_id, kind.value, integration.integration_id)
    return integration


def deactivate_integration(db: Session, integration_id: str, actor_id: str) -> Integration:
    integration = _get_owned_or_404(db, integration_id, actor_id)
    if integration.is_active:
        integration.is_active = False
        integration.access_token = None
        integration.refresh_token = None
        db.commit()
        db.refresh(integration)
        logger.info("User %s disconnected %s", actor_id, integration.provider.value)
    return integration


def mark_synced(db: Session, integration_id: str, actor_id: str) -> Integration:
    integration = _get_owned_or_404(db, integration_id, actor_id)
    if not integration.is_active:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Integration is not active")
    integration.last_sync_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(integration)
    return integration
