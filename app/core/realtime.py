# app/core/realtime.py
"""
Topic-based fan-out of change events to websocket clients.

Connections subscribe to ``user:<id>`` and ``workspace:<id>`` topics at
handshake time. Routers publish through RealtimeBroadcaster, which only
knows the EventPublisher interface, so tests can swap in a recorder.
Delivery is best-effort and at-most-once: no acknowledgements, no replay.
"""
import asyncio
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Protocol, Set

from fastapi import Request
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState
from loguru import logger


def user_topic(user_id: int) -> str:
    return f"user:{user_id}"


def workspace_topic(workspace_id: int) -> str:
    return f"workspace:{workspace_id}"


class EventPublisher(Protocol):
    async def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        ...


class TopicHub:
    """In-process registry of websocket connections keyed by topic."""

    def __init__(self) -> None:
        self._topics: Dict[str, Set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def subscribe(self, websocket: WebSocket, topics: Iterable[str]) -> None:
        async with self._lock:
            for topic in topics:
                self._topics[topic].add(websocket)

    async def unsubscribe(self, websocket: WebSocket) -> None:
        async with self._lock:
            for topic in list(self._topics):
                clients = self._topics[topic]
                clients.discard(websocket)
                if not clients:
                    self._topics.pop(topic, None)

    async def subscriber_count(self, topic: str) -> int:
        async with self._lock:
            return len(self._topics.get(topic, ()))

    async def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        async with self._lock:
            connections = list(self._topics.get(topic, ()))

        stale: List[WebSocket] = []
        for websocket in connections:
            if websocket.application_state != WebSocketState.CONNECTED:
                stale.append(websocket)
                continue
            try:
                await websocket.send_json({"event": event, "data": payload})
            except (WebSocketDisconnect, RuntimeError):
                stale.append(websocket)

        for websocket in stale:
            await self.unsubscribe(websocket)

    async def reset(self) -> None:
        """Drop every subscription (used by tests)."""
        async with self._lock:
            self._topics.clear()


class RealtimeBroadcaster:
    """
    Routes domain events to topics. Publishing never raises: a failed send
    is logged and the remaining topics still get the event.
    """

    def __init__(self, publisher: EventPublisher) -> None:
        self.publisher = publisher

    async def _emit(self, event: str, payload: Dict[str, Any], topics: Iterable[str]) -> None:
        for topic in dict.fromkeys(topics):
            try:
                await self.publisher.publish(topic, event, payload)
            except Exception as e:
                logger.warning(f"Realtime publish of {event} to {topic} failed: {e}")

    @staticmethod
    def _topics(workspace_id: Optional[int], user_ids: Iterable[int] = ()) -> List[str]:
        topics = [workspace_topic(workspace_id)] if workspace_id is not None else []
        return topics + [user_topic(user_id) for user_id in user_ids]

    async def task_created(self, task: Dict[str, Any], workspace_id: Optional[int], user_ids: Iterable[int]) -> None:
        await self._emit("task_created", task, self._topics(workspace_id, user_ids))

    async def task_updated(self, task: Dict[str, Any], workspace_id: Optional[int]) -> None:
        assignee_ids = [user["user_id"] for user in task.get("assigned_users", [])]
        await self._emit("task_updated", task, self._topics(workspace_id, assignee_ids))

    async def task_deleted(self, task: Dict[str, Any], workspace_id: Optional[int]) -> None:
        await self._emit("task_deleted", task, self._topics(workspace_id))

    async def task_assignment_changed(self, task_id: int, assigned_user_ids: List[int],
                                      workspace_id: Optional[int]) -> None:
        payload = {"task_id": task_id, "assigned_user_ids": assigned_user_ids}
        await self._emit("task_assignment_changed", payload, self._topics(workspace_id, assigned_user_ids))

    async def comment_added(self, comment: Dict[str, Any], workspace_id: Optional[int]) -> None:
        await self._emit("comment_added", comment, self._topics(workspace_id, [comment["user_id"]]))

    async def comment_updated(self, comment: Dict[str, Any], workspace_id: Optional[int]) -> None:
        await self._emit("comment_updated", comment, self._topics(workspace_id, [comment["user_id"]]))

    async def comment_deleted(self, comment: Dict[str, Any], workspace_id: Optional[int]) -> None:
        await self._emit("comment_deleted", comment, self._topics(workspace_id))

    async def undo_action_performed(self, payload: Dict[str, Any], user_id: int) -> None:
        await self._emit("undo_action_performed", payload, [user_topic(user_id)])


def get_broadcaster(request: Request) -> RealtimeBroadcaster:
    """FastAPI dependency: broadcaster bound to the application's hub"""
    return RealtimeBroadcaster(request.app.state.topic_hub)
