"""Client-side comment thread view."""
import logging
from typing import Any, Optional

from vinstack.client.api import ApiClient, ApiError
from vinstack.client.channel import ChannelFollower
from vinstack.realtime.hub import POSTGRES_CHANGES, ChannelEvent, ChannelHub, snippet_channel
from vinstack.services.comment_tree import build_comment_tree

logger = logging.getLogger(__name__)

COMMENTS_TABLE = "snippet_comments"


class CommentThreadView(ChannelFollower):
    """Holds the threaded comments of one snippet.

    Fetches flat rows and assembles the tree locally; every comment change on
    the snippet's channel triggers a full re-fetch.
    """

    def __init__(
        self, api: ApiClient, snippet_id: str, hub: Optional[ChannelHub] = None, viewer_id: Optional[str] = None,
    ):
        super().__init__(hub, snippet_channel(snippet_id))
        self.api = api
        self.snippet_id = snippet_id
        self.viewer_id = viewer_id
        self.rows: list[dict[str, Any]] = []
        self.threads: list[dict[str, Any]] = []

    def start(self) -> None:
        self._subscribe()
        self.refresh()

    def stop(self) -> None:
        self._unsubscribe()

    def refresh(self) -> bool:
        try:
            rows = self.api.list_comments(self.snippet_id, flat=True, viewer_id=self.viewer_id)
        except ApiError as exc:
            logger.error("Could not load comments for snippet %s: %s", self.snippet_id, exc)
            return False
        self.rows = [{k: v for k, v in row.items() if k != "replies"} for row in rows]
        self.threads = build_comment_tree(self.rows)
        return True

    def handle_event(self, event: ChannelEvent) -> None:
        if event.kind == POSTGRES_CHANGES and event.payload.get("table") == COMMENTS_TABLE:
            self.refresh()

    @property
    def unresolved_count(self) -> int:
        return sum(1 for row in self.rows if not row["is_resolved"])
