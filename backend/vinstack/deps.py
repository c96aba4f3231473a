"""Shared FastAPI dependencies."""
from typing import Iterator

from fastapi import Request

from vinstack.integrations.elevenlabs import ElevenLabsClient
from vinstack.integrations.stripe_billing import StripeBillingClient
from vinstack.integrations.tavus import TavusClient
from vinstack.realtime.hub import ChannelHub
from vinstack.services.sandbox_service import CodeSandbox


def get_hub(request: Request) -> ChannelHub:
    """The channel hub owned by the running application."""
    return request.app.state.hub


def get_sandbox(request: Request) -> CodeSandbox:
    """The code sandbox owned by the running application."""
    return request.app.state.sandbox


# One provider client per request; its connection pool is closed once the
# response has been sent, whether or not the route raised.

def get_elevenlabs() -> Iterator[ElevenLabsClient]:
    client = ElevenLabsClient()
    try:
        yield client
    finally:
        client.close()


def get_tavus() -> Iterator[TavusClient]:
    client = TavusClient()
    try:
        yield client
    finally:
        client.close()


def get_stripe() -> Iterator[StripeBillingClient]:
    client = StripeBillingClient()
    try:
        yield client
    finally:
        client.close()
