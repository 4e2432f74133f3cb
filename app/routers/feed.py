# app/routers/feed.py
"""
Realtime change notifications for a team over a WebSocket.

Each frame is {"table": ..., "event": ..., "id": ...}; clients re-fetch
the affected view (tasks, messages, leaderboard) on receipt.
"""
import asyncio
import logging
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect, status

from app.core.auth import resolve_token
from app.core.errors import DomainError
from app.database import AsyncSessionLocal
from app.services.change_feed import change_feed, ChangeEvent
from app.services.teams import get_team, require_team_role

logger = logging.getLogger(__name__)

router = APIRouter(tags=["feed"])

FEED_TABLES = ("tasks", "messages", "teams")


@router.websocket("/teams/{team_id}/feed")
async def team_feed(websocket: WebSocket, team_id: int, token: str = ""):
    async with AsyncSessionLocal() as db:
        try:
            user, _ = await resolve_token(db, token)
            team = await get_team(db, team_id)
            await require_team_role(db, team, user.id)
        except (HTTPException, DomainError):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(event: ChangeEvent) -> None:
        queue.put_nowait(event.to_dict())

    handles = [change_feed.subscribe(table, on_change, {"team_id": team_id}) for table in FEED_TABLES]
    logger.info("User %s subscribed to team %s feed", user.id, team_id)

    receiver = asyncio.create_task(websocket.receive_text())
    getter = None
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({receiver, getter}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                await websocket.send_json(getter.result())
            else:
                getter.cancel()
            if receiver in done:
                # Client frames are ignored; a disconnect raises here
                receiver.result()
                receiver = asyncio.create_task(websocket.receive_text())
    except WebSocketDisconnect:
        pass
    finally:
        receiver.cancel()
        if getter is not None:
            getter.cancel()
        for handle in handles:
            change_feed.unsubscribe(handle)
        logger.info("User %s left team %s feed", user.id, team_id)
