"""
Undo tests: restoring deleted tasks, lists, tags and comments
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.db import crud
from app.db.models import UndoEntityType, UndoLog, as_utc
from app.exceptions.domain import Expired, NotFound
from conftest import create_task


async def undo(client: AsyncClient, user, undo_id: int):
    return await client.post("/undo", json={"undo_id": undo_id}, headers=user["headers"])


class TestUndoEndpoint:

    async def test_restores_deleted_task(self, client: AsyncClient, publisher, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "oops", priority="High")
        deleted = await client.delete(f"/tasks/{task['task_id']}", headers=alice["headers"])

        response = await undo(client, alice, deleted.json()["undo_id"])
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["entity_type"] == "task"
        assert data["entity_id"] == task["task_id"]
        assert data["restored_entity"]["title"] == "oops"

        restored = await client.get(f"/tasks/{task['task_id']}", headers=alice["headers"])
        assert restored.status_code == 200
        assert restored.json()["priority"] == "High"

        assert publisher.topics("undo_action_performed") == [f"user:{alice['id']}"]
        payload = publisher.events("undo_action_performed")[0][1]
        assert payload["undone_by_user_id"] == alice["id"]
        assert payload["entity_type"] == "task"

    async def test_cascade_undo_restores_root_only(self, client: AsyncClient, alice, inbox):
        root = await create_task(client, alice, inbox["task_list_id"], "root")
        child = await create_task(client, alice, inbox["task_list_id"], "child", parent_task_id=root["task_id"])
        deleted = await client.delete(f"/tasks/{root['task_id']}", headers=alice["headers"])

        await undo(client, alice, deleted.json()["undo_id"])

        assert (await client.get(f"/tasks/{root['task_id']}", headers=alice["headers"])).status_code == 200
        assert (await client.get(f"/tasks/{child['task_id']}", headers=alice["headers"])).status_code == 404

    async def test_consumed_entry_cannot_be_reused(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "once")
        deleted = await client.delete(f"/tasks/{task['task_id']}", headers=alice["headers"])
        undo_id = deleted.json()["undo_id"]

        assert (await undo(client, alice, undo_id)).status_code == 200
        second = await undo(client, alice, undo_id)
        assert second.status_code == 404
        assert second.json() == {"error": "Undo entry not found"}

    async def test_other_user_cannot_undo(self, client: AsyncClient, alice, bob, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "mine")
        deleted = await client.delete(f"/tasks/{task['task_id']}", headers=alice["headers"])

        response = await undo(client, bob, deleted.json()["undo_id"])
        assert response.status_code == 403

    async def test_restores_task_list(self, client: AsyncClient, alice, inbox):
        deleted = await client.delete(f"/task_lists/{inbox['task_list_id']}", headers=alice["headers"])

        response = await undo(client, alice, deleted.json()["undo_id"])
        assert response.status_code == 200
        assert response.json()["entity_type"] == "task_list"

        lists = await client.get("/task_lists", headers=alice["headers"])
        assert [item["task_list_id"] for item in lists.json()] == [inbox["task_list_id"]]

    async def test_restores_tag_and_comment(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x", tags=["keep"])
        tag_id = task["tags"][0]["tag_id"]
        comment = await client.post(
            f"/tasks/{task['task_id']}/comments", json={"content": "note"}, headers=alice["headers"]
        )

        deleted_tag = await client.delete(f"/tags/{tag_id}", headers=alice["headers"])
        deleted_comment = await client.delete(
            f"/tasks/comments/{comment.json()['comment_id']}", headers=alice["headers"]
        )
        assert (await undo(client, alice, deleted_tag.json()["undo_id"])).status_code == 200
        assert (await undo(client, alice, deleted_comment.json()["undo_id"])).status_code == 200

        reread = await client.get(f"/tasks/{task['task_id']}", headers=alice["headers"])
        assert [tag["tag_id"] for tag in reread.json()["tags"]] == [tag_id]
        comments = await client.get(f"/tasks/{task['task_id']}/comments", headers=alice["headers"])
        assert [item["content"] for item in comments.json()] == ["note"]

    async def test_tag_undo_refused_when_name_was_reused(self, client: AsyncClient, alice):
        old = await client.post("/tags", json={"tag_name": "urgent", "user_id": alice["id"]}, headers=alice["headers"])
        deleted = await client.delete(f"/tags/{old.json()['tag_id']}", headers=alice["headers"])
        await client.post("/tags", json={"tag_name": "urgent", "user_id": alice["id"]}, headers=alice["headers"])

        response = await undo(client, alice, deleted.json()["undo_id"])
        assert response.status_code == 400
        assert response.json() == {"error": "Tag already exists"}

        active = await client.get(
            "/tags", params={"user_id": alice["id"], "is_active": "true"}, headers=alice["headers"]
        )
        assert [tag["tag_name"] for tag in active.json()] == ["urgent"]
        assert active.json()[0]["tag_id"] != old.json()["tag_id"]

        # The entry survives the refused restore
        assert (await undo(client, alice, deleted.json()["undo_id"])).status_code == 400

    async def test_unknown_entry(self, client: AsyncClient, alice):
        response = await undo(client, alice, 12345)

        assert response.status_code == 404


class TestUndoWindow:

    async def _deleted_entry(self, client: AsyncClient, db_session, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "timed")
        deleted = await client.delete(f"/tasks/{task['task_id']}", headers=alice["headers"])
        entry = await db_session.get(UndoLog, deleted.json()["undo_id"])
        return task, entry

    async def test_restore_inside_window(self, client: AsyncClient, db_session, alice, inbox):
        task, entry = await self._deleted_entry(client, db_session, alice, inbox)

        result = await crud.undo.restore_undo(
            db_session, entry.id, alice["id"], now=as_utc(entry.created_at) + timedelta(seconds=9)
        )
        assert result.entity_id == task["task_id"]
        assert result.entity.is_active is True

    async def test_restore_after_window_expires(self, client: AsyncClient, db_session, alice, inbox):
        _, entry = await self._deleted_entry(client, db_session, alice, inbox)

        with pytest.raises(Expired):
            await crud.undo.restore_undo(
                db_session, entry.id, alice["id"], now=as_utc(entry.created_at) + timedelta(seconds=11)
            )

    async def test_new_capture_purges_expired_entries(self, client: AsyncClient, db_session, alice, inbox):
        other = await create_task(client, alice, inbox["task_list_id"], "later")
        _, entry = await self._deleted_entry(client, db_session, alice, inbox)
        stale_id = entry.id

        fresh = await crud.undo.capture_undo(
            db_session, alice["id"], UndoEntityType.TASK,
            await crud.task.get_task_detail(db_session, other["task_id"]),
            now=as_utc(entry.created_at) + timedelta(seconds=30),
        )
        await db_session.commit()

        assert fresh.id != stale_id
        with pytest.raises(NotFound):
            await crud.undo.restore_undo(db_session, stale_id, alice["id"])
