"""Shared plumbing for third-party HTTP providers."""
import logging
from typing import Any, Optional

import httpx

from vinstack.config import settings

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """A provider call failed (transport error, non-2xx or unusable body)."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.status_code = status_code


class ProviderNotConfigured(ProviderError):
    """The provider's API key is not set."""


class ProviderClient:
    """Base for the sync ``httpx`` clients. Pass ``client`` to inject a transport."""

    name = "provider"

    def __init__(self, base_url: str, api_key: str, client: Optional[httpx.Client] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client or httpx.Client(timeout=settings.PROVIDER_TIMEOUT_SECONDS)

    def _headers(self) -> dict[str, str]:
        raise NotImplementedError

    def _require_key(self) -> None:
        if not self.api_key:
            raise ProviderNotConfigured(self.name, f"{self.name} API key is not configured")

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self._require_key()
        url = f"{self.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("%s %s %s failed with HTTP %s", self.name, method, path, exc.response.status_code)
            raise ProviderError(self.name, f"HTTP {exc.response.status_code}", exc.response.status_code) from exc
        except httpx.RequestError as exc:
            logger.error("%s %s %s request error: %s", self.name, method, path, exc)
            raise ProviderError(self.name, "request failed") from exc
        return response

    def request_json(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = self.request(method, path, **kwargs)
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(self.name, "invalid JSON response") from exc

    def close(self) -> None:
        self._client.close()
