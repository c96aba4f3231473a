"""Thin HTTP client for the VinStack API."""
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    """The API answered with a non-2xx status or could not be reached."""

    def __init__(self, status_code: Optional[int], detail: Any):
        super().__init__(f"API error {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ApiClient:
    """Wraps an ``httpx.Client`` (a FastAPI ``TestClient`` works too)."""

    def __init__(self, http: httpx.Client, prefix: str = "/api"):
        self.http = http
        self.prefix = prefix.rstrip("/")

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self.http.request(method, f"{self.prefix}{path}", **kwargs)
        except httpx.HTTPError as exc:
            raise ApiError(None, str(exc)) from exc
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ApiError(response.status_code, detail)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # -------------------- collaborators --------------------

    def list_collaborators(
        self, snippet_id: str, accepted_only: bool = False, viewer_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params = {"accepted_only": str(accepted_only).lower()}
        if viewer_id:
            params["viewer_id"] = viewer_id
        return self._request("GET", f"/snippets/{snippet_id}/collaborators", params=params)

    # -------------------- comments --------------------

    def list_comments(
        self, snippet_id: str, flat: bool = False, viewer_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params = {"flat": str(flat).lower()}
        if viewer_id:
            params["viewer_id"] = viewer_id
        return self._request("GET", f"/snippets/{snippet_id}/comments", params=params)

    # -------------------- notifications --------------------

    def list_notifications(self, user_id: str, unread_only: bool = False) -> list[dict[str, Any]]:
        return self._request(
            "GET", "/notifications/", params={"user_id": user_id, "unread_only": str(unread_only).lower()},
        )

    def mark_notification_read(self, notification_id: str) -> dict[str, Any]:
        return self._request("POST", f"/notifications/{notification_id}/read")

    def mark_all_notifications_read(self, user_id: str) -> dict[str, Any]:
        return self._request("POST", "/notifications/read-all", params={"user_id": user_id})

    def delete_notification(self, notification_id: str) -> None:
        self._request("DELETE", f"/notifications/{notification_id}")
