"""Base for client-side views that follow a hub channel.

Hub callbacks fire on whichever thread performed the write, so events are
only queued there. The owner applies them on its own thread by calling
``process_events``.
"""
import logging
import queue
from typing import Optional

from vinstack.realtime.hub import ChannelEvent, ChannelHub, Subscription

logger = logging.getLogger(__name__)


class ChannelFollower:
    def __init__(self, hub: Optional[ChannelHub], channel: str):
        self.hub = hub
        self.channel = channel
        self._subscription: Optional[Subscription] = None
        self._inbox: "queue.Queue[ChannelEvent]" = queue.Queue()

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def _subscribe(self) -> None:
        if self._subscription is None and self.hub is not None:
            self._subscription = self.hub.subscribe(self.channel, self._inbox.put)

    def _unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        # anything still queued belongs to the old subscription
        while not self._inbox.empty():
            self._inbox.get_nowait()

    def process_events(self, timeout: float = 0.0) -> int:
        """Apply queued events. Waits up to ``timeout`` for the first one."""
        handled = 0
        block = timeout > 0
        while True:
            try:
                event = self._inbox.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                return handled
            block = False
            try:
                self.handle_event(event)
            except Exception:
                logger.exception("%s failed to handle %s/%s", type(self).__name__, event.kind, event.event)
            handled += 1

    def handle_event(self, event: ChannelEvent) -> None:
        raise NotImplementedError
