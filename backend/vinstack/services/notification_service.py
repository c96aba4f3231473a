"""Notification fan-out and the one-way read/delete transitions."""
import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from vinstack.models.notification import Notification, NotificationType
from vinstack.realtime.hub import ChannelHub, notifications_channel, publish

logger = logging.getLogger(__name__)

TABLE = "notifications"


def _snapshot(n: Notification) -> dict[str, Any]:
    return {
        "notification_id": n.notification_id,
        "user_id": n.user_id,
        "type": n.type.value if n.type else None,
        "title": n.title,
        "is_read": n.is_read,
    }


def notify(
    db: Session,
    hub: Optional[ChannelHub],
    user_id: str,
    notification_type: NotificationType,
    title: str,
    message: str,
    data: Optional[dict[str, Any]] = None,
) -> Notification:
    """Insert a notification for ``user_id`` and tell their channel."""
    notification = Notification(
        user_id=user_id,
        type=notification_type,
        title=title,
        message=message,
        data=data or {},
        is_read=False,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    publish(hub, notifications_channel(user_id), TABLE, "INSERT", _snapshot(notification))
    logger.info("Notified user %s (%s): %s", user_id, notification_type.value, title)
    return notification


def list_notifications(db: Session, user_id: str, unread_only: bool = False) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(Notification.created_at.desc()).all()


def unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .count()
    )


def _get_or_404(db: Session, notification_id: str) -> Notification:
    notification = db.query(Notification).filter(Notification.notification_id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    return notification


def mark_as_read(db: Session, hub: Optional[ChannelHub], notification_id: str) -> Notification:
    """unread → read. Marking an already-read notification is a no-op."""
    notification = _get_or_404(db, notification_id)
    if not notification.is_read:
        notification.is_read = True
        db.commit()
        db.refresh(notification)
        publish(hub, notifications_channel(notification.user_id), TABLE, "UPDATE", _snapshot(notification))
    return notification


def mark_all_as_read(db: Session, hub: Optional[ChannelHub], user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()
    if updated:
        publish(hub, notifications_channel(user_id), TABLE, "UPDATE", {"user_id": user_id, "is_read": True})
    logger.info("Marked %d notification(s) read for user %s", updated, user_id)
    return updated


def delete_notification(db: Session, hub: Optional[ChannelHub], notification_id: str) -> None:
    notification = _get_or_404(db, notification_id)
    record = _snapshot(notification)
    db.delete(notification)
    db.commit()
    publish(hub, notifications_channel(record["user_id"]), TABLE, "DELETE", record)
