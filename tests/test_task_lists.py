"""
Task list and workspace access tests
"""
from httpx import AsyncClient

from conftest import create_personal_list, create_task


class TestCreateTaskList:

    async def test_personal_list(self, client: AsyncClient, alice):
        task_list = await create_personal_list(client, alice, "Errands")

        assert task_list["user_id"] == alice["id"]
        assert task_list["workspace_id"] is None
        assert task_list["is_active"] is True

    async def test_both_scopes_rejected(self, client: AsyncClient, alice, team):
        response = await client.post(
            "/task_lists",
            json={"list_name": "X", "user_id": alice["id"], "workspace_id": team["workspace_id"]},
            headers=alice["headers"],
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only one of workspace_id or user_id should be specified"

    async def test_no_scope_rejected(self, client: AsyncClient, alice):
        response = await client.post("/task_lists", json={"list_name": "X"}, headers=alice["headers"])

        assert response.status_code == 400

    async def test_personal_list_for_someone_else_is_forbidden(self, client: AsyncClient, alice, bob):
        response = await client.post(
            "/task_lists", json={"list_name": "X", "user_id": bob["id"]}, headers=alice["headers"]
        )

        assert response.status_code == 403

    async def test_workspace_list_requires_membership(self, client: AsyncClient, carol, team):
        response = await client.post(
            "/task_lists", json={"list_name": "X", "workspace_id": team["workspace_id"]}, headers=carol["headers"]
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden: no access to workspace"


class TestListTaskLists:

    async def test_personal_and_workspace_lists_with_incomplete_counts(
            self, client: AsyncClient, alice, bob, inbox, team_list):
        await create_task(client, alice, inbox["task_list_id"], "open")
        await create_task(client, alice, inbox["task_list_id"], "done", is_completed=True)
        await create_task(client, bob, team_list["task_list_id"], "shared")

        response = await client.get("/task_lists", headers=alice["headers"])
        assert response.status_code == 200
        counts = {item["task_list_id"]: item["incomplete_task_count"] for item in response.json()}
        assert counts == {inbox["task_list_id"]: 1, team_list["task_list_id"]: 1}

        bob_lists = await client.get("/task_lists", headers=bob["headers"])
        assert [item["task_list_id"] for item in bob_lists.json()] == [team_list["task_list_id"]]

    async def test_single_list(self, client: AsyncClient, alice, bob, inbox):
        await create_task(client, alice, inbox["task_list_id"], "open")
        await create_task(client, alice, inbox["task_list_id"], "done", is_completed=True)

        response = await client.get(f"/task_lists/{inbox['task_list_id']}", headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["list_name"] == "Inbox"
        assert response.json()["incomplete_task_count"] == 1

        foreign = await client.get(f"/task_lists/{inbox['task_list_id']}", headers=bob["headers"])
        missing = await client.get("/task_lists/999", headers=alice["headers"])
        assert foreign.status_code == 403
        assert missing.status_code == 404

    async def test_removed_member_loses_workspace_lists(self, client: AsyncClient, alice, bob, team, team_list):
        response = await client.delete(
            f"/workspaces/{team['workspace_id']}/members/{bob['id']}", headers=alice["headers"]
        )
        assert response.status_code == 204

        bob_lists = await client.get("/task_lists", headers=bob["headers"])
        assert bob_lists.json() == []


class TestUpdateAndDeleteTaskList:

    async def test_rename(self, client: AsyncClient, alice, inbox):
        response = await client.put(
            f"/task_lists/{inbox['task_list_id']}", json={"list_name": "Home"}, headers=alice["headers"]
        )

        assert response.status_code == 200
        assert response.json()["list_name"] == "Home"
        assert response.json()["undo_id"] is None

    async def test_unknown_field_rejected(self, client: AsyncClient, alice, inbox):
        response = await client.put(
            f"/task_lists/{inbox['task_list_id']}", json={"color": "red"}, headers=alice["headers"]
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid field in update: color"

    async def test_delete_hides_list_and_its_tasks(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "hidden")

        response = await client.delete(f"/task_lists/{inbox['task_list_id']}", headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["undo_id"] > 0

        lists = await client.get("/task_lists", headers=alice["headers"])
        assert lists.json() == []
        task_response = await client.get(f"/tasks/{task['task_id']}", headers=alice["headers"])
        assert task_response.status_code == 404

    async def test_deactivate_via_update_returns_undo_id(self, client: AsyncClient, alice, inbox):
        response = await client.put(
            f"/task_lists/{inbox['task_list_id']}", json={"is_active": False}, headers=alice["headers"]
        )

        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert response.json()["undo_id"] is not None

    async def test_other_users_list_is_forbidden(self, client: AsyncClient, bob, inbox):
        response = await client.delete(f"/task_lists/{inbox['task_list_id']}", headers=bob["headers"])

        assert response.status_code == 403

    async def test_deleted_list_cannot_be_edited_or_revived(self, client: AsyncClient, alice, inbox):
        path = f"/task_lists/{inbox['task_list_id']}"
        await client.delete(path, headers=alice["headers"])

        renamed = await client.put(path, json={"list_name": "Ghost"}, headers=alice["headers"])
        revived = await client.put(path, json={"is_active": True}, headers=alice["headers"])
        assert renamed.status_code == 404
        assert revived.status_code == 404
        assert (await client.get("/task_lists", headers=alice["headers"])).json() == []

    async def test_missing_list(self, client: AsyncClient, alice):
        response = await client.put("/task_lists/999", json={"list_name": "X"}, headers=alice["headers"])

        assert response.status_code == 404
        assert response.json() == {"error": "Task list not found"}
