"""
Authentication endpoint tests for TaskCraft API
"""
from httpx import AsyncClient

from conftest import DEFAULT_PASSWORD, signup


class TestSignup:

    async def test_signup_returns_token_profile_and_settings(self, client: AsyncClient):
        response = await client.post(
            "/auth/signup",
            json={"email": "dana@example.com", "password": DEFAULT_PASSWORD, "full_name": "Dana"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token"]
        assert data["user_profile"]["email"] == "dana@example.com"
        assert data["user_profile"]["full_name"] == "Dana"
        assert data["user_setting"]["dark_mode_enabled"] is False
        assert data["user_setting"]["notif_in_app_task_assigned"] is True

    async def test_duplicate_email_is_rejected_case_insensitively(self, client: AsyncClient):
        await signup(client, "erin@example.com")

        response = await client.post(
            "/auth/signup", json={"email": "Erin@Example.com", "password": DEFAULT_PASSWORD}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Email already in use"}

    async def test_short_password_is_a_validation_error(self, client: AsyncClient):
        response = await client.post("/auth/signup", json={"email": "frank@example.com", "password": "short"})

        assert response.status_code == 400
        assert "password" in response.json()["error"]

    async def test_missing_email_is_reported_by_name(self, client: AsyncClient):
        response = await client.post("/auth/signup", json={"password": DEFAULT_PASSWORD})

        assert response.status_code == 400
        assert response.json()["error"] == "email is required"


class TestLogin:

    async def test_login_success(self, client: AsyncClient, alice):
        response = await client.post("/auth/login", json={"email": alice["email"], "password": DEFAULT_PASSWORD})

        assert response.status_code == 200
        assert response.json()["user_profile"]["user_id"] == alice["id"]

    async def test_wrong_password(self, client: AsyncClient, alice):
        response = await client.post("/auth/login", json={"email": alice["email"], "password": "WrongPassword1"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid email or password"}

    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post("/auth/login", json={"email": "nobody@example.com", "password": DEFAULT_PASSWORD})

        assert response.status_code == 401


class TestTokenHandling:

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/task_lists")

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    async def test_garbage_token(self, client: AsyncClient):
        response = await client.get("/task_lists", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token"}

    async def test_logout(self, client: AsyncClient, alice):
        response = await client.post("/auth/logout", headers=alice["headers"])

        assert response.status_code == 204


class TestSystemEndpoints:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "connected"

    async def test_trace_id_header_is_echoed(self, client: AsyncClient):
        response = await client.get("/", headers={"X-Trace-ID": "abc123"})

        assert response.status_code == 200
        assert response.headers["x-trace-id"] == "abc123"

    async def test_security_headers(self, client: AsyncClient):
        response = await client.get("/")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
