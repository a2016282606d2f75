"""
Realtime fan-out tests: topic hub delivery, event routing and the websocket handshake
"""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect, WebSocketState

from app.api.v1.endpoints.realtime import WS_UNAUTHORIZED, resolve_topics
from app.core.realtime import RealtimeBroadcaster, TopicHub, user_topic, workspace_topic
from app.exceptions.auth import AuthenticationError
from app.main import app
from conftest import RecordingPublisher


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.application_state = WebSocketState.CONNECTED
        self.fail = fail
        self.sent = []

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(message)


class FailingPublisher(RecordingPublisher):
    async def publish(self, topic, event, payload):
        if topic.startswith("workspace:"):
            raise RuntimeError("broker down")
        await super().publish(topic, event, payload)


class TestTopicHub:

    async def test_publish_reaches_only_subscribers(self):
        hub = TopicHub()
        alice, bob = FakeSocket(), FakeSocket()
        await hub.subscribe(alice, [user_topic(1), workspace_topic(7)])
        await hub.subscribe(bob, [user_topic(2), workspace_topic(7)])

        await hub.publish(workspace_topic(7), "task_updated", {"task_id": 3})
        await hub.publish(user_topic(1), "undo_action_performed", {"entity_id": 3})

        assert alice.sent == [
            {"event": "task_updated", "data": {"task_id": 3}},
            {"event": "undo_action_performed", "data": {"entity_id": 3}},
        ]
        assert bob.sent == [{"event": "task_updated", "data": {"task_id": 3}}]

    async def test_broken_connection_is_dropped(self):
        hub = TopicHub()
        healthy, broken = FakeSocket(), FakeSocket(fail=True)
        await hub.subscribe(healthy, [workspace_topic(1)])
        await hub.subscribe(broken, [workspace_topic(1)])

        await hub.publish(workspace_topic(1), "task_deleted", {"task_id": 1})

        assert len(healthy.sent) == 1
        assert await hub.subscriber_count(workspace_topic(1)) == 1

    async def test_unsubscribe_removes_every_topic(self):
        hub = TopicHub()
        socket = FakeSocket()
        await hub.subscribe(socket, [user_topic(1), workspace_topic(2)])

        await hub.unsubscribe(socket)

        assert await hub.subscriber_count(user_topic(1)) == 0
        assert await hub.subscriber_count(workspace_topic(2)) == 0


class TestBroadcasterRouting:

    async def test_task_updated_goes_to_workspace_and_assignees(self):
        publisher = RecordingPublisher()
        broadcaster = RealtimeBroadcaster(publisher)

        await broadcaster.task_updated(
            {"task_id": 1, "assigned_users": [{"user_id": 4}, {"user_id": 5}]}, workspace_id=9
        )

        assert publisher.topics("task_updated") == ["workspace:9", "user:4", "user:5"]

    async def test_duplicate_topics_are_sent_once(self):
        publisher = RecordingPublisher()
        broadcaster = RealtimeBroadcaster(publisher)

        await broadcaster.task_assignment_changed(1, [4, 4], workspace_id=None)

        assert publisher.topics("task_assignment_changed") == ["user:4"]

    async def test_publish_failure_does_not_stop_other_topics(self):
        publisher = FailingPublisher()
        broadcaster = RealtimeBroadcaster(publisher)

        await broadcaster.task_created({"task_id": 1}, workspace_id=3, user_ids=[8])

        assert publisher.topics("task_created") == ["user:8"]


class TestHandshake:

    async def test_topics_cover_user_and_memberships(self, client, alice, team):
        user, topics = await resolve_topics(alice["token"])

        assert user.id == alice["id"]
        assert topics == [user_topic(alice["id"]), workspace_topic(team["workspace_id"])]

    async def test_bearer_prefix_is_accepted(self, client, alice):
        user, topics = await resolve_topics(f"Bearer {alice['token']}")

        assert topics == [user_topic(user.id)]

    async def test_missing_token_is_rejected(self):
        with pytest.raises(AuthenticationError):
            await resolve_topics(None)


def test_websocket_without_token_is_closed_with_4401():
    test_client = TestClient(app)
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with test_client.websocket_connect("/ws"):
            pass
    assert excinfo.value.code == WS_UNAUTHORIZED
