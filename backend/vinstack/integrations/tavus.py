"""Tavus video generation client."""
import logging
import time
from typing import Any, Callable, Optional

import httpx

from vinstack.config import settings
from vinstack.integrations.base import ProviderClient, ProviderError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("completed", "failed")
# Tavus reports "ready" for finished renders
_STATUS_ALIASES = {"ready": "completed", "queued": "pending", "generating": "processing", "error": "failed"}


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    raw = str(data.get("status", "pending")).lower()
    return {
        "video_id": data.get("video_id") or data.get("id"),
        "status": _STATUS_ALIASES.get(raw, raw),
        "video_url": data.get("download_url") or data.get("hosted_url") or data.get("video_url"),
        "error": data.get("status_details") if raw in ("failed", "error") else None,
    }


class TavusClient(ProviderClient):
    name = "tavus"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        replica_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(
            base_url or settings.TAVUS_API_URL,
            settings.TAVUS_API_KEY if api_key is None else api_key,
            client,
        )
        self.replica_id = replica_id or settings.TAVUS_REPLICA_ID

    def _headers(self) -> dict[str, str]:
        return {"x-api-key": self.api_key}

    def create_video(self, script: str, title: Optional[str] = None) -> dict[str, Any]:
        body = {"replica_id": self.replica_id, "script": script}
        if title:
            body["video_name"] = title
        result = _normalize(self.request_json("POST", "/videos", json=body))
        if not result["video_id"]:
            raise ProviderError(self.name, "response did not contain a video id")
        logger.info("Requested Tavus video %s", result["video_id"])
        return result

    def get_video(self, video_id: str) -> dict[str, Any]:
        result = _normalize(self.request_json("GET", f"/videos/{video_id}"))
        result["video_id"] = result["video_id"] or video_id
        return result

    def wait_for_video(
        self,
        video_id: str,
        timeout: float = 300.0,
        interval: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> dict[str, Any]:
        """Poll until the video completes or fails, or ``timeout`` elapses.

        Returns the last status seen; a caller can tell a deadline from a
        terminal state by checking ``status``.
        """
        deadline = time.monotonic() + timeout
        result = self.get_video(video_id)
        while result["status"] not in TERMINAL_STATUSES and time.monotonic() < deadline:
            sleep(interval)
            result = self.get_video(video_id)
        if result["status"] not in TERMINAL_STATUSES:
            logger.warning("Tavus video %s still %s after %.0fs", video_id, result["status"], timeout)
        return result
