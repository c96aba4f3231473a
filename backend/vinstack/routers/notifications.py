"""Notification API routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_hub
from vinstack.realtime.hub import ChannelHub
from vinstack.schemas.notification import MarkAllReadOut, NotificationOut, UnreadCountOut
from vinstack.services import notification_service

router = APIRouter()


@router.get("/", response_model=list[NotificationOut])
def list_notifications(user_id: str, unread_only: bool = False, db: Session = Depends(get_db)):
    """Newest first."""
    return notification_service.list_notifications(db, user_id, unread_only)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(user_id: str, db: Session = Depends(get_db)):
    return UnreadCountOut(unread_count=notification_service.unread_count(db, user_id))


@router.post("/read-all", response_model=MarkAllReadOut)
def mark_all_as_read(user_id: str, db: Session = Depends(get_db), hub: ChannelHub = Depends(get_hub)):
    return MarkAllReadOut(updated=notification_service.mark_all_as_read(db, hub, user_id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_as_read(notification_id: str, db: Session = Depends(get_db), hub: ChannelHub = Depends(get_hub)):
    return notification_service.mark_as_read(db, hub, notification_id)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notification(notification_id: str, db: Session = Depends(get_db), hub: ChannelHub = Depends(get_hub)):
    notification_service.delete_notification(db, hub, notification_id)
