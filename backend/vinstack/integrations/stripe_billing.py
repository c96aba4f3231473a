"""Stripe Checkout and Billing Portal sessions over the REST API.

Stripe takes form-encoded bodies; nested keys use bracket notation
(``line_items[0][price]``). Only redirect URLs come back to the caller.
"""
import logging
from typing import Any, Optional

import httpx

from vinstack.config import settings
from vinstack.integrations.base import ProviderClient, ProviderError

logger = logging.getLogger(__name__)


class StripeBillingClient(ProviderClient):
    name = "stripe"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 client: Optional[httpx.Client] = None):
        super().__init__(
            base_url or settings.STRIPE_API_URL,
            settings.STRIPE_SECRET_KEY if api_key is None else api_key,
            client,
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _redirect(self, data: dict[str, Any]) -> dict[str, str]:
        if not data.get("id") or not data.get("url"):
            raise ProviderError(self.name, "session response is missing id or url")
        return {"session_id": data["id"], "url": data["url"]}

    def create_checkout_session(
        self,
        price_id: str,
        user_id: str,
        customer_email: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> dict[str, str]:
        form = {
            "mode": "subscription",
            "line_items[0][price]": price_id,
            "line_items[0][quantity]": "1",
            "client_reference_id": user_id,
            "success_url": f"{settings.STRIPE_SUCCESS_URL}?session_id={{CHECKOUT_SESSION_ID}}",
            "cancel_url": settings.STRIPE_CANCEL_URL,
            "metadata[user_id]": user_id,
        }
        if customer_id:
            form["customer"] = customer_id
        elif customer_email:
            form["customer_email"] = customer_email
        result = self._redirect(self.request_json("POST", "/checkout/sessions", data=form))
        logger.info("Created checkout session %s for user %s (%s)", result["session_id"], user_id, price_id)
        return result

    def create_portal_session(self, customer_id: str, return_url: Optional[str] = None) -> dict[str, str]:
        form = {"customer": customer_id, "return_url": return_url or settings.STRIPE_PORTAL_RETURN_URL}
        return self._redirect(self.request_json("POST", "/billing_portal/sessions", data=form))
