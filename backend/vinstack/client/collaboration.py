"""Live collaboration session for one snippet.

States::

    DISCONNECTED --connect()--> CONNECTING --roster loaded--> SYNCED
    SYNCED --collaborator row changed--> RECONCILING --roster re-fetched--> SYNCED
    any --disconnect()--> DISCONNECTED

The roster is never patched from an event payload. Every collaborator
change triggers a full re-fetch of the accepted roster, so the local copy is
always a server snapshot.
"""
import enum
import hashlib
import logging
from typing import Any, Optional

from vinstack.client.api import ApiClient, ApiError
from vinstack.client.channel import ChannelFollower
from vinstack.realtime.hub import BROADCAST, POSTGRES_CHANGES, PRESENCE, ChannelEvent, ChannelHub, snippet_channel

logger = logging.getLogger(__name__)

CURSOR_EVENT = "cursor_move"
COLLABORATORS_TABLE = "snippet_collaborators"

CURSOR_COLORS = (
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4",
    "#FFEAA7", "#DDA0DD", "#98D8C8", "#F7DC6F",
)


def color_for_user(user_id: str) -> str:
    """Stable cursor colour for ``user_id``."""
    digest = hashlib.md5(user_id.encode("utf-8")).digest()
    return CURSOR_COLORS[digest[0] % len(CURSOR_COLORS)]


class SessionState(str, enum.Enum):
    disconnected = "disconnected"
    connecting = "connecting"
    synced = "synced"
    reconciling = "reconciling"


class CollaborationSession(ChannelFollower):
    def __init__(self, api: ApiClient, hub: ChannelHub, snippet_id: str, user_id: str, username: str):
        super().__init__(hub, snippet_channel(snippet_id))
        self.api = api
        self.snippet_id = snippet_id
        self.user_id = user_id
        self.username = username
        self.color = color_for_user(user_id)
        self.state = SessionState.disconnected
        self.collaborators: list[dict[str, Any]] = []
        self.cursors: dict[str, dict[str, Any]] = {}
        self.online_users: set[str] = set()

    @property
    def is_connected(self) -> bool:
        return self.state in (SessionState.synced, SessionState.reconciling)

    # -------------------- lifecycle --------------------

    def connect(self) -> None:
        if self.state != SessionState.disconnected:
            return
        self.state = SessionState.connecting
        self._subscribe()
        self.hub.track(self.channel, self.user_id, {"username": self.username, "color": self.color})
        self.online_users = set(self.hub.presence_state(self.channel))
        self._fetch_roster()
        self.state = SessionState.synced
        logger.info("User %s joined collaboration on snippet %s", self.user_id, self.snippet_id)

    def disconnect(self) -> None:
        if self.state == SessionState.disconnected:
            return
        self._unsubscribe()
        self.hub.untrack(self.channel, self.user_id)
        self.cursors.clear()
        self.online_users.clear()
        self.state = SessionState.disconnected
        logger.info("User %s left collaboration on snippet %s", self.user_id, self.snippet_id)

    # -------------------- outgoing --------------------

    def broadcast_cursor(self, line: int, column: int) -> bool:
        """Tell the other participants where our cursor is. No-op unless connected."""
        if not self.is_connected or self._subscription is None:
            return False
        self._subscription.broadcast(CURSOR_EVENT, {
            "user_id": self.user_id,
            "username": self.username,
            "line": line,
            "column": column,
            "color": self.color,
        })
        return True

    # -------------------- incoming --------------------

    def _fetch_roster(self) -> bool:
        try:
            self.collaborators = self.api.list_collaborators(
                self.snippet_id, accepted_only=True, viewer_id=self.user_id,
            )
            return True
        except ApiError as exc:
            # keep the stale roster
            logger.error("Could not fetch collaborators for snippet %s: %s", self.snippet_id, exc)
            return False

    def handle_event(self, event: ChannelEvent) -> None:
        if not self.is_connected:
            return
        if event.kind == POSTGRES_CHANGES and event.payload.get("table") == COLLABORATORS_TABLE:
            self.state = SessionState.reconciling
            try:
                self._fetch_roster()
            finally:
                self.state = SessionState.synced
        elif event.kind == BROADCAST and event.event == CURSOR_EVENT:
            self._apply_cursor(event.payload)
        elif event.kind == PRESENCE:
            key = event.payload.get("key")
            if event.event == "join":
                self.online_users.add(key)
            elif event.event == "leave":
                self.online_users.discard(key)
                self.cursors.pop(key, None)

    def _apply_cursor(self, payload: dict[str, Any]) -> None:
        user_id: Optional[str] = payload.get("user_id")
        if not user_id or user_id == self.user_id:
            return
        self.cursors[user_id] = {
            "username": payload.get("username", ""),
            "line": payload.get("line", 0),
            "column": payload.get("column", 0),
            "color": payload.get("color") or color_for_user(user_id),
        }
