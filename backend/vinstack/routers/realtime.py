"""WebSocket endpoints bridging clients to the channel hub.

Protocol (JSON text frames):

server → client
    {"type": "system", "status": "SUBSCRIBED", "channel": ..., "presence": {...}}
    {"type": "postgres_changes" | "broadcast" | "presence", "event": ..., "channel": ..., "payload": ...}
    {"type": "pong"}
    {"type": "error", "message": ...}

client → server
    {"type": "broadcast", "event": "cursor_move", "payload": {...}}
    {"type": "ping"}
"""
import asyncio
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.models.snippet import Snippet
from vinstack.models.user import Profile
from vinstack.realtime.hub import ChannelHub, notifications_channel, snippet_channel

logger = logging.getLogger(__name__)
router = APIRouter()

RELAYED_EVENTS = ("cursor_move",)


async def _pump(websocket: WebSocket, queue: "asyncio.Queue[dict[str, Any]]") -> None:
    while True:
        message = await queue.get()
        await websocket.send_json(message)


async def _serve_channel(
    websocket: WebSocket,
    channel: str,
    user_id: str,
    presence_meta: Optional[dict[str, Any]] = None,
) -> None:
    """Subscribe the socket to ``channel`` until the client goes away.

    With ``presence_meta`` the user is tracked on the channel for the lifetime
    of the connection and may relay cursor broadcasts.
    """
    hub: ChannelHub = websocket.app.state.hub
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    # hub callbacks fire on request threads, so hop onto this loop
    subscription = hub.subscribe(
        channel, lambda event: loop.call_soon_threadsafe(queue.put_nowait, event.to_message()),
    )
    sender = asyncio.create_task(_pump(websocket, queue))
    try:
        await websocket.send_json({
            "type": "system",
            "status": "SUBSCRIBED",
            "channel": channel,
            "presence": hub.presence_state(channel),
        })
        if presence_meta is not None:
            hub.track(channel, user_id, presence_meta)
        logger.info("User %s subscribed to %s", user_id, channel)

        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json({"type": "error", "message": "Invalid JSON"})
                continue

            kind = message.get("type")
            if kind == "ping":
                await websocket.send_json({"type": "pong"})
            elif kind == "broadcast" and presence_meta is not None and message.get("event") in RELAYED_EVENTS:
                payload = dict(message.get("payload") or {})
                payload["user_id"] = user_id
                subscription.broadcast(message["event"], payload)
            else:
                await websocket.send_json({"type": "error", "message": f"Unsupported message: {kind}"})
    except WebSocketDisconnect:
        logger.info("User %s disconnected from %s", user_id, channel)
    finally:
        sender.cancel()
        subscription.unsubscribe()
        if presence_meta is not None:
            hub.untrack(channel, user_id)


@router.websocket("/snippets/{snippet_id}/ws/{user_id}")
async def snippet_socket(websocket: WebSocket, snippet_id: str, user_id: str, db: Session = Depends(get_db)):
    """Row changes, cursor broadcasts and presence for one snippet."""
    await websocket.accept()
    snippet = db.query(Snippet).filter(Snippet.snippet_id == snippet_id).first()
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not snippet or not profile:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    meta = {"user_id": user_id, "username": profile.username, "avatar_url": profile.avatar_url}
    db.close()
    await _serve_channel(websocket, snippet_channel(snippet_id), user_id, meta)


@router.websocket("/notifications/ws/{user_id}")
async def notifications_socket(websocket: WebSocket, user_id: str):
    """Row changes of the user's notifications."""
    await websocket.accept()
    await _serve_channel(websocket, notifications_channel(user_id), user_id)
