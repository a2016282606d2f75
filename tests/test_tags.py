"""
Tag CRUD and task-tag link tests
"""
from httpx import AsyncClient

from conftest import create_task


async def create_tag(client: AsyncClient, user, name: str, **scope):
    response = await client.post("/tags", json={"tag_name": name, **scope}, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


class TestTagCrud:

    async def test_create_and_list_personal_tags(self, client: AsyncClient, alice):
        await create_tag(client, alice, "home", user_id=alice["id"])
        await create_tag(client, alice, "errand", user_id=alice["id"])

        response = await client.get("/tags", params={"user_id": alice["id"]}, headers=alice["headers"])
        assert response.status_code == 200
        assert [tag["tag_name"] for tag in response.json()] == ["errand", "home"]

    async def test_listing_requires_exactly_one_scope(self, client: AsyncClient, alice, team):
        neither = await client.get("/tags", headers=alice["headers"])
        both = await client.get(
            "/tags", params={"user_id": alice["id"], "workspace_id": team["workspace_id"]}, headers=alice["headers"]
        )

        assert neither.status_code == 400
        assert both.status_code == 400

    async def test_duplicate_name_in_scope(self, client: AsyncClient, alice):
        await create_tag(client, alice, "home", user_id=alice["id"])

        response = await client.post("/tags", json={"tag_name": "home", "user_id": alice["id"]}, headers=alice["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "Tag already exists"}

    async def test_workspace_tags_need_membership(self, client: AsyncClient, carol, team):
        response = await client.get("/tags", params={"workspace_id": team["workspace_id"]}, headers=carol["headers"])

        assert response.status_code == 403

    async def test_other_users_personal_tags_forbidden(self, client: AsyncClient, alice, bob):
        response = await client.get("/tags", params={"user_id": bob["id"]}, headers=alice["headers"])

        assert response.status_code == 403

    async def test_rename(self, client: AsyncClient, alice):
        tag = await create_tag(client, alice, "hom", user_id=alice["id"])

        response = await client.put(f"/tags/{tag['tag_id']}", json={"tag_name": "home"}, headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["tag_name"] == "home"

    async def test_rename_onto_existing_name(self, client: AsyncClient, alice):
        await create_tag(client, alice, "home", user_id=alice["id"])
        other = await create_tag(client, alice, "work", user_id=alice["id"])

        response = await client.put(f"/tags/{other['tag_id']}", json={"tag_name": "home"}, headers=alice["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "Tag already exists"}

    async def test_reactivating_into_taken_name(self, client: AsyncClient, alice):
        old = await create_tag(client, alice, "urgent", user_id=alice["id"])
        await client.delete(f"/tags/{old['tag_id']}", headers=alice["headers"])
        await create_tag(client, alice, "urgent", user_id=alice["id"])

        response = await client.put(f"/tags/{old['tag_id']}", json={"is_active": True}, headers=alice["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "Tag already exists"}

        active = await client.get(
            "/tags", params={"user_id": alice["id"], "is_active": "true"}, headers=alice["headers"]
        )
        assert [tag["tag_name"] for tag in active.json()] == ["urgent"]

    async def test_reactivating_free_name(self, client: AsyncClient, alice):
        old = await create_tag(client, alice, "urgent", user_id=alice["id"])
        await client.delete(f"/tags/{old['tag_id']}", headers=alice["headers"])

        response = await client.put(f"/tags/{old['tag_id']}", json={"is_active": True}, headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["is_active"] is True

    async def test_empty_update(self, client: AsyncClient, alice):
        tag = await create_tag(client, alice, "home", user_id=alice["id"])

        response = await client.put(f"/tags/{tag['tag_id']}", json={}, headers=alice["headers"])
        assert response.status_code == 400
        assert response.json() == {"error": "No fields to update"}

    async def test_deleted_tag_disappears_from_tasks(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x", tags=["soon-gone"])
        tag_id = task["tags"][0]["tag_id"]

        response = await client.delete(f"/tags/{tag_id}", headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["undo_id"] > 0

        reread = await client.get(f"/tasks/{task['task_id']}", headers=alice["headers"])
        assert reread.json()["tags"] == []
        active = await client.get(
            "/tags", params={"user_id": alice["id"], "is_active": "true"}, headers=alice["headers"]
        )
        assert active.json() == []


class TestTaskTagLinks:

    async def test_attach_skips_out_of_scope_tags(self, client: AsyncClient, alice, inbox, team):
        personal = await create_tag(client, alice, "mine", user_id=alice["id"])
        shared = await create_tag(client, alice, "shared", workspace_id=team["workspace_id"])
        task = await create_task(client, alice, inbox["task_list_id"], "x")

        response = await client.post(
            f"/tasks/{task['task_id']}/tags",
            json={"tag_ids": [personal["tag_id"], shared["tag_id"]]},
            headers=alice["headers"],
        )
        assert response.status_code == 200
        assert [tag["tag_id"] for tag in response.json()] == [personal["tag_id"]]

    async def test_task_tags_by_id_must_match_scope(self, client: AsyncClient, alice, inbox, team):
        shared = await create_tag(client, alice, "shared", workspace_id=team["workspace_id"])

        task = await create_task(client, alice, inbox["task_list_id"], "x", tags=[shared["tag_id"]])
        assert task["tags"] == []

    async def test_detach(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x", tags=["a"])
        tag_id = task["tags"][0]["tag_id"]

        response = await client.delete(f"/tasks/{task['task_id']}/tags/{tag_id}", headers=alice["headers"])
        assert response.status_code == 204

        reread = await client.get(f"/tasks/{task['task_id']}", headers=alice["headers"])
        assert reread.json()["tags"] == []

    async def test_detach_foreign_scope_tag(self, client: AsyncClient, alice, inbox, team):
        shared = await create_tag(client, alice, "shared", workspace_id=team["workspace_id"])
        task = await create_task(client, alice, inbox["task_list_id"], "x")

        response = await client.delete(f"/tasks/{task['task_id']}/tags/{shared['tag_id']}", headers=alice["headers"])
        assert response.status_code == 403
