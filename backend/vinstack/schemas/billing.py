"""Pydantic schemas for plans, checkout and billing portal sessions."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel


class PlanOut(BaseModel):
    plan_id: str
    name: str
    price: float
    interval: str
    max_snippets: int  # -1 = unlimited
    max_collaborators: int
    features: list[str]
    stripe_price_id: Optional[str] = None
    is_popular: bool = False


class CheckoutRequest(BaseModel):
    user_id: str
    price_id: str


class PortalRequest(BaseModel):
    user_id: str


class RedirectOut(BaseModel):
    session_id: str
    url: str
