# app/api/v1/endpoints/realtime.py
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from app.auth.dependencies import authenticate
from app.core.realtime import user_topic, workspace_topic
from app.db.crud.workspace import load_workspace_memberships
from app.db.database import AsyncSessionLocal
from app.core import tracing

router = APIRouter()

WS_UNAUTHORIZED = 4401


async def resolve_topics(token: Optional[str]):
    """Authenticate the handshake token and list the topics to join."""
    async with AsyncSessionLocal() as db:
        user = await authenticate(db, token)
        memberships = await load_workspace_memberships(db, user.id)
    topics = [user_topic(user.id)] + [workspace_topic(workspace.id) for _, workspace in memberships]
    return user, topics


@router.websocket("/ws")
async def events(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Push-only event stream. The token comes from ?token= or the
    Authorization header; topics are fixed for the connection's lifetime.
    """
    hub = websocket.app.state.topic_hub
    try:
        user, topics = await resolve_topics(token or websocket.headers.get("authorization"))
    except HTTPException as e:
        tracing.warning("Websocket handshake rejected", reason=str(e.detail))
        await websocket.close(code=WS_UNAUTHORIZED)
        return

    await websocket.accept()
    await hub.subscribe(websocket, topics)
    tracing.info("Websocket connected", user_id=user.id, topics=topics)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        tracing.info("Websocket disconnected", user_id=user.id)
    finally:
        await hub.unsubscribe(websocket)
