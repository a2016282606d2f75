"""
Pytest configuration and fixtures for TaskCraft API tests
"""
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-not-for-production")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENABLE_JSON_LOGGING"] = "false"
os.environ["ENVIRONMENT"] = "testing"

import pytest
from typing import Any, AsyncGenerator, Dict, List, Tuple
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

import app.db.models  # noqa: F401
from app.main import app
from app.db.database import AsyncSessionLocal, Base, engine
from app.core.realtime import RealtimeBroadcaster, get_broadcaster

DEFAULT_PASSWORD = "Password123!"


class RecordingPublisher:
    """EventPublisher that keeps every (topic, event, payload) it is given"""

    def __init__(self):
        self.published: List[Tuple[str, str, Dict[str, Any]]] = []

    async def publish(self, topic: str, event: str, payload: Dict[str, Any]) -> None:
        self.published.append((topic, event, payload))

    def events(self, name: str) -> List[Tuple[str, Dict[str, Any]]]:
        return [(topic, payload) for topic, event, payload in self.published if event == name]

    def topics(self, name: str) -> List[str]:
        return [topic for topic, _ in self.events(name)]


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test on the shared in-memory engine"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    await app.state.topic_hub.reset()


@pytest.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
async def client(publisher: RecordingPublisher) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose realtime events land in the recording publisher"""
    app.dependency_overrides[get_broadcaster] = lambda: RealtimeBroadcaster(publisher)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def signup(client: AsyncClient, email: str, full_name: str = None) -> Dict[str, Any]:
    response = await client.post(
        "/auth/signup",
        json={"email": email, "password": DEFAULT_PASSWORD, "full_name": full_name or email.split("@")[0]},
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return {
        "id": data["user_profile"]["user_id"],
        "email": email,
        "token": data["token"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


async def create_personal_list(client: AsyncClient, user: Dict[str, Any], name: str = "Inbox") -> Dict[str, Any]:
    response = await client.post(
        "/task_lists", json={"list_name": name, "user_id": user["id"]}, headers=user["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_workspace(client: AsyncClient, owner: Dict[str, Any], name: str = "Team",
                           members: List[Dict[str, Any]] = ()) -> Dict[str, Any]:
    response = await client.post("/workspaces", json={"workspace_name": name}, headers=owner["headers"])
    assert response.status_code == 201, response.text
    workspace = response.json()
    for member in members:
        added = await client.post(
            f"/workspaces/{workspace['workspace_id']}/members",
            json={"user_id": member["id"]},
            headers=owner["headers"],
        )
        assert added.status_code == 201, added.text
    return workspace


async def create_task(client: AsyncClient, user: Dict[str, Any], task_list_id: int, title: str,
                      **fields) -> Dict[str, Any]:
    response = await client.post(
        "/tasks", json={"task_list_id": task_list_id, "title": title, **fields}, headers=user["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def alice(client: AsyncClient) -> Dict[str, Any]:
    return await signup(client, "alice@example.com", "Alice")


@pytest.fixture
async def bob(client: AsyncClient) -> Dict[str, Any]:
    return await signup(client, "bob@example.com", "Bob")


@pytest.fixture
async def carol(client: AsyncClient) -> Dict[str, Any]:
    return await signup(client, "carol@example.com", "Carol")


@pytest.fixture
async def inbox(client: AsyncClient, alice) -> Dict[str, Any]:
    """Alice's personal list"""
    return await create_personal_list(client, alice)


@pytest.fixture
async def team(client: AsyncClient, alice, bob) -> Dict[str, Any]:
    """Workspace owned by Alice with Bob as member"""
    return await create_workspace(client, alice, "Team", members=[bob])


@pytest.fixture
async def team_list(client: AsyncClient, alice, team) -> Dict[str, Any]:
    response = await client.post(
        "/task_lists",
        json={"list_name": "Sprint", "workspace_id": team["workspace_id"]},
        headers=alice["headers"],
    )
    assert response.status_code == 201, response.text
    return response.json()
