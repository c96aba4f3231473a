"""In-process channel hub.

Fans out three kinds of events per named channel:

- ``postgres_changes``: a row was inserted/updated/deleted (table + record)
- ``broadcast``: an ephemeral message from one subscriber to the others
- ``presence``: a key joined or left the channel

Writes happen in the sync request thread pool while WebSocket listeners live on
the event loop, so the hub is guarded by a lock and never calls back while
holding it.
"""
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

POSTGRES_CHANGES = "postgres_changes"
BROADCAST = "broadcast"
PRESENCE = "presence"


def snippet_channel(snippet_id: str) -> str:
    return f"snippet:{snippet_id}"


def notifications_channel(user_id: str) -> str:
    return f"notifications:{user_id}"


@dataclass(frozen=True)
class ChannelEvent:
    channel: str
    kind: str  # postgres_changes | broadcast | presence
    event: str  # INSERT/UPDATE/DELETE | broadcast event name | join/leave
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        return {"type": self.kind, "event": self.event, "channel": self.channel, "payload": self.payload}


Callback = Callable[[ChannelEvent], None]


class Subscription:
    """Handle returned by ``ChannelHub.subscribe``."""

    def __init__(self, hub: "ChannelHub", channel: str, sub_id: int):
        self._hub = hub
        self.channel = channel
        self.sub_id = sub_id
        self.active = True

    def broadcast(self, event: str, payload: dict[str, Any]) -> None:
        self._hub.broadcast(self.channel, event, payload, sender=self.sub_id)

    def unsubscribe(self) -> None:
        if self.active:
            self._hub.unsubscribe(self)
            self.active = False


class ChannelHub:
    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._subscribers: dict[str, dict[int, Callback]] = {}
        self._presence: dict[str, dict[str, dict[str, Any]]] = {}

    # ── subscriptions ────────────────────────────────────────────
    def subscribe(self, channel: str, callback: Callback) -> Subscription:
        with self._lock:
            sub_id = next(self._ids)
            self._subscribers.setdefault(channel, {})[sub_id] = callback
        logger.debug("Subscriber %d joined channel %s", sub_id, channel)
        return Subscription(self, channel, sub_id)

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            subs = self._subscribers.get(subscription.channel, {})
            subs.pop(subscription.sub_id, None)
            if not subs:
                self._subscribers.pop(subscription.channel, None)
        logger.debug("Subscriber %d left channel %s", subscription.sub_id, subscription.channel)

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._subscribers.get(channel, {}))

    # ── publishing ───────────────────────────────────────────────
    def publish_change(self, channel: str, table: str, event_type: str, record: dict[str, Any]) -> None:
        """Notify subscribers that a row of ``table`` changed."""
        self._dispatch(ChannelEvent(
            channel=channel,
            kind=POSTGRES_CHANGES,
            event=event_type,
            payload={"table": table, "record": record},
        ))

    def broadcast(self, channel: str, event: str, payload: dict[str, Any], sender: Optional[int] = None) -> None:
        """Send an ephemeral message to every subscriber except the sender."""
        self._dispatch(
            ChannelEvent(channel=channel, kind=BROADCAST, event=event, payload=dict(payload)),
            exclude=sender,
        )

    # ── presence ─────────────────────────────────────────────────
    def track(self, channel: str, key: str, meta: Optional[dict[str, Any]] = None) -> None:
        with self._lock:
            members = self._presence.setdefault(channel, {})
            is_new = key not in members
            members[key] = dict(meta or {})
        if is_new:
            self._dispatch(ChannelEvent(
                channel=channel, kind=PRESENCE, event="join", payload={"key": key, "meta": dict(meta or {})},
            ))

    def untrack(self, channel: str, key: str) -> None:
        with self._lock:
            members = self._presence.get(channel, {})
            meta = members.pop(key, None)
            if not members:
                self._presence.pop(channel, None)
        if meta is not None:
            self._dispatch(ChannelEvent(
                channel=channel, kind=PRESENCE, event="leave", payload={"key": key, "meta": meta},
            ))

    def presence_state(self, channel: str) -> dict[str, dict[str, Any]]:
        with self._lock:
            return {key: dict(meta) for key, meta in self._presence.get(channel, {}).items()}

    # ── internals ────────────────────────────────────────────────
    def _dispatch(self, event: ChannelEvent, exclude: Optional[int] = None) -> None:
        with self._lock:
            targets = [
                cb for sub_id, cb in self._subscribers.get(event.channel, {}).items()
                if sub_id != exclude
            ]
        for callback in targets:
            try:
                callback(event)
            except Exception:
                logger.exception("Channel %s subscriber failed on %s/%s", event.channel, event.kind, event.event)


def publish(hub: Optional[ChannelHub], channel: str, table: str, event_type: str, record: dict[str, Any]) -> None:
    """``hub.publish_change`` that tolerates running without a hub (scripts, migrations)."""
    if hub is not None:
        hub.publish_change(channel, table, event_type, record)
