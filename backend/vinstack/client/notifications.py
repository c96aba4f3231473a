"""Client-side notification list with optimistic updates."""
import logging
from typing import Any, Optional

from vinstack.client.api import ApiClient, ApiError
from vinstack.client.channel import ChannelFollower
from vinstack.realtime.hub import ChannelEvent, ChannelHub, notifications_channel

logger = logging.getLogger(__name__)


class NotificationCenter(ChannelFollower):
    """Mutations are applied locally first, then sent to the API.

    A failed remote call is logged and the local list is reconciled with a
    re-fetch; nothing here raises to the caller.
    """

    def __init__(self, api: ApiClient, user_id: str, hub: Optional[ChannelHub] = None):
        super().__init__(hub, notifications_channel(user_id))
        self.api = api
        self.user_id = user_id
        self.notifications: list[dict[str, Any]] = []

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n["is_read"])

    def start(self) -> None:
        """Load the list and, with a hub, follow the user's channel."""
        self._subscribe()
        self.refresh()

    def stop(self) -> None:
        self._unsubscribe()

    def refresh(self) -> bool:
        try:
            self.notifications = self.api.list_notifications(self.user_id)
            return True
        except ApiError as exc:
            logger.error("Could not load notifications for %s: %s", self.user_id, exc)
            return False

    def handle_event(self, event: ChannelEvent) -> None:
        self.refresh()

    # -------------------- mutations --------------------

    def mark_as_read(self, notification_id: str) -> None:
        for n in self.notifications:
            if n["notification_id"] == notification_id:
                n["is_read"] = True
        try:
            self.api.mark_notification_read(notification_id)
        except ApiError as exc:
            logger.error("Failed to mark notification %s read: %s", notification_id, exc)
            self.refresh()

    def mark_all_as_read(self) -> None:
        for n in self.notifications:
            n["is_read"] = True
        try:
            self.api.mark_all_notifications_read(self.user_id)
        except ApiError as exc:
            logger.error("Failed to mark all notifications read for %s: %s", self.user_id, exc)
            self.refresh()

    def delete(self, notification_id: str) -> None:
        self.notifications = [n for n in self.notifications if n["notification_id"] != notification_id]
        try:
            self.api.delete_notification(notification_id)
        except ApiError as exc:
            logger.error("Failed to delete notification %s: %s", notification_id, exc)
            self.refresh()
