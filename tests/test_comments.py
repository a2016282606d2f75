"""
Task comment tests
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.db import crud
from app.db.models import TaskComment, as_utc
from app.exceptions.domain import Expired
from conftest import create_task


async def add_comment(client: AsyncClient, user, task_id: int, content: str, **extra):
    response = await client.post(
        f"/tasks/{task_id}/comments", json={"content": content, **extra}, headers=user["headers"]
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestComments:

    async def test_add_and_list(self, client: AsyncClient, publisher, alice, bob, team_list):
        task = await create_task(client, alice, team_list["task_list_id"], "discuss")
        first = await add_comment(client, alice, task["task_id"], "first")
        reply = await add_comment(client, bob, task["task_id"], "reply", parent_comment_id=first["comment_id"])

        response = await client.get(f"/tasks/{task['task_id']}/comments", headers=alice["headers"])
        assert response.status_code == 200
        assert [comment["content"] for comment in response.json()] == ["first", "reply"]
        assert reply["parent_comment_id"] == first["comment_id"]

        assert publisher.topics("comment_added") == [
            f"workspace:{team_list['workspace_id']}", f"user:{alice['id']}",
            f"workspace:{team_list['workspace_id']}", f"user:{bob['id']}",
        ]

    async def test_blank_content(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")

        response = await client.post(
            f"/tasks/{task['task_id']}/comments", json={"content": "  "}, headers=alice["headers"]
        )
        assert response.status_code == 400
        assert response.json() == {"error": "content is required"}

    async def test_parent_on_another_task(self, client: AsyncClient, alice, inbox):
        one = await create_task(client, alice, inbox["task_list_id"], "one")
        two = await create_task(client, alice, inbox["task_list_id"], "two")
        comment = await add_comment(client, alice, one["task_id"], "on one")

        response = await client.post(
            f"/tasks/{two['task_id']}/comments",
            json={"content": "misplaced", "parent_comment_id": comment["comment_id"]},
            headers=alice["headers"],
        )
        assert response.status_code == 400

    async def test_outsider_cannot_comment(self, client: AsyncClient, alice, carol, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")

        response = await client.post(
            f"/tasks/{task['task_id']}/comments", json={"content": "hi"}, headers=carol["headers"]
        )
        assert response.status_code == 404

    async def test_author_edits_within_window(self, client: AsyncClient, publisher, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "typo")

        response = await client.put(
            f"/tasks/comments/{comment['comment_id']}", json={"content": "fixed"}, headers=alice["headers"]
        )
        assert response.status_code == 200
        assert response.json()["content"] == "fixed"
        assert publisher.topics("comment_updated") == [f"user:{alice['id']}"]

    async def test_only_author_may_edit(self, client: AsyncClient, alice, bob, team_list):
        task = await create_task(client, alice, team_list["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "mine")

        response = await client.put(
            f"/tasks/comments/{comment['comment_id']}", json={"content": "hijack"}, headers=bob["headers"]
        )
        assert response.status_code == 403

    async def test_author_who_lost_task_access(self, client: AsyncClient, alice, bob, team, team_list):
        task = await create_task(client, alice, team_list["task_list_id"], "x")
        comment = await add_comment(client, bob, task["task_id"], "before leaving")
        await client.delete(f"/workspaces/{team['workspace_id']}/members/{bob['id']}", headers=alice["headers"])

        edited = await client.put(
            f"/tasks/comments/{comment['comment_id']}", json={"content": "after"}, headers=bob["headers"]
        )
        deleted = await client.delete(f"/tasks/comments/{comment['comment_id']}", headers=bob["headers"])
        assert edited.status_code == 404
        assert deleted.status_code == 404

    async def test_comment_on_deleted_task_is_frozen(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "note")
        await client.delete(f"/tasks/{task['task_id']}", headers=alice["headers"])

        response = await client.put(
            f"/tasks/comments/{comment['comment_id']}", json={"content": "edit"}, headers=alice["headers"]
        )
        assert response.status_code == 404

    async def test_delete_hides_comment(self, client: AsyncClient, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "bye")

        response = await client.delete(f"/tasks/comments/{comment['comment_id']}", headers=alice["headers"])
        assert response.status_code == 200
        assert response.json()["is_deleted"] is True
        assert response.json()["undo_id"] > 0

        listing = await client.get(f"/tasks/{task['task_id']}/comments", headers=alice["headers"])
        assert listing.json() == []

        again = await client.delete(f"/tasks/comments/{comment['comment_id']}", headers=alice["headers"])
        assert again.status_code == 404


class TestEditWindow:

    async def test_edit_after_fifteen_minutes_expires(self, client: AsyncClient, db_session, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "old")

        stored = await db_session.get(TaskComment, comment["comment_id"])
        created_at = as_utc(stored.created_at)

        with pytest.raises(Expired) as excinfo:
            await crud.comment.update_comment(
                db_session, alice["id"], comment["comment_id"], "late", now=created_at + timedelta(minutes=16)
            )
        assert excinfo.value.detail == "Edit window (15min) has expired"

    async def test_edit_just_inside_window(self, client: AsyncClient, db_session, alice, inbox):
        task = await create_task(client, alice, inbox["task_list_id"], "x")
        comment = await add_comment(client, alice, task["task_id"], "old")

        stored = await db_session.get(TaskComment, comment["comment_id"])
        updated, _ = await crud.comment.update_comment(
            db_session, alice["id"], comment["comment_id"], "new",
            now=as_utc(stored.created_at) + timedelta(minutes=14, seconds=59),
        )
        assert updated.content == "new"
