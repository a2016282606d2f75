"""
Undo ledger.

Every destructive change stores a JSON pre-image of the affected row. An
entry can be replayed once, by the user who created it, within
UNDO_WINDOW_SECONDS. Each entity type has its own snapshot and restore
pair with an explicit column list.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.db.crud.activity import record_activity
from app.db.models import (
    Tag, Task, TaskComment, TaskList, UndoEntityType, UndoLog, UndoOperation,
    TaskPriority, TaskStatus, as_utc, utc_now,
)
from app.exceptions.domain import Expired, Forbidden, NotFound, ValidationError


def _iso(value: Optional[datetime]) -> Optional[str]:
    return as_utc(value).isoformat() if value is not None else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


# Snapshots

def snapshot_task(task: Task) -> Dict[str, Any]:
    return {
        "task_id": task.id,
        "task_list_id": task.task_list_id,
        "parent_task_id": task.parent_task_id,
        "title": task.title,
        "description": task.description,
        "priority": TaskPriority(task.priority).value,
        "status": TaskStatus(task.status).value,
        "is_completed": task.is_completed,
        "due_datetime": _iso(task.due_datetime),
        "estimated_effort_mins": task.estimated_effort_mins,
        "position_order": task.position_order,
        "is_active": task.is_active,
        "recurring_pattern": task.recurring_pattern,
        "recurrence_end_date": _iso(task.recurrence_end_date),
        "recurrence_count": task.recurrence_count,
        "created_by_user_id": task.created_by_user_id,
        "created_at": _iso(task.created_at),
        "updated_at": _iso(task.updated_at),
    }


def snapshot_task_list(task_list: TaskList) -> Dict[str, Any]:
    return {
        "task_list_id": task_list.id,
        "workspace_id": task_list.workspace_id,
        "user_id": task_list.user_id,
        "list_name": task_list.list_name,
        "position_order": task_list.position_order,
        "is_active": task_list.is_active,
        "created_at": _iso(task_list.created_at),
        "updated_at": _iso(task_list.updated_at),
    }


def snapshot_tag(tag: Tag) -> Dict[str, Any]:
    return {
        "tag_id": tag.id,
        "workspace_id": tag.workspace_id,
        "user_id": tag.user_id,
        "tag_name": tag.tag_name,
        "is_active": tag.is_active,
        "created_at": _iso(tag.created_at),
        "updated_at": _iso(tag.updated_at),
    }


def snapshot_comment(comment: TaskComment) -> Dict[str, Any]:
    return {
        "comment_id": comment.id,
        "task_id": comment.task_id,
        "user_id": comment.user_id,
        "parent_comment_id": comment.parent_comment_id,
        "content": comment.content,
        "is_deleted": comment.is_deleted,
        "created_at": _iso(comment.created_at),
        "updated_at": _iso(comment.updated_at),
    }


SNAPSHOTTERS: Dict[UndoEntityType, Callable[[Any], Dict[str, Any]]] = {
    UndoEntityType.TASK: snapshot_task,
    UndoEntityType.TASK_LIST: snapshot_task_list,
    UndoEntityType.TAG: snapshot_tag,
    UndoEntityType.COMMENT: snapshot_comment,
}


# Restorers: insert the row when it is gone, otherwise overwrite every non-key column

async def _load_or_new(db: AsyncSession, model, entity_id: int):
    row = await db.get(model, entity_id, populate_existing=True)
    if row is None:
        row = model(id=entity_id)
        db.add(row)
    return row


async def restore_task(db: AsyncSession, snapshot: Dict[str, Any]) -> Task:
    task = await _load_or_new(db, Task, snapshot["task_id"])
    task.task_list_id = snapshot["task_list_id"]
    task.parent_task_id = snapshot["parent_task_id"]
    task.title = snapshot["title"]
    task.description = snapshot["description"]
    task.priority = TaskPriority(snapshot["priority"])
    task.status = TaskStatus(snapshot["status"])
    task.is_completed = snapshot["is_completed"]
    task.due_datetime = _parse(snapshot["due_datetime"])
    task.estimated_effort_mins = snapshot["estimated_effort_mins"]
    task.position_order = snapshot["position_order"]
    task.is_active = snapshot["is_active"]
    task.recurring_pattern = snapshot["recurring_pattern"]
    task.recurrence_end_date = _parse(snapshot["recurrence_end_date"])
    task.recurrence_count = snapshot["recurrence_count"]
    task.created_by_user_id = snapshot["created_by_user_id"]
    task.created_at = _parse(snapshot["created_at"])
    return task


async def restore_task_list(db: AsyncSession, snapshot: Dict[str, Any]) -> TaskList:
    task_list = await _load_or_new(db, TaskList, snapshot["task_list_id"])
    task_list.workspace_id = snapshot["workspace_id"]
    task_list.user_id = snapshot["user_id"]
    task_list.list_name = snapshot["list_name"]
    task_list.position_order = snapshot["position_order"]
    task_list.is_active = snapshot["is_active"]
    task_list.created_at = _parse(snapshot["created_at"])
    return task_list


async def restore_tag(db: AsyncSession, snapshot: Dict[str, Any]) -> Tag:
    if snapshot["is_active"]:
        if snapshot["workspace_id"] is not None:
            in_scope = Tag.workspace_id == snapshot["workspace_id"]
        else:
            in_scope = (Tag.user_id == snapshot["user_id"]) & Tag.workspace_id.is_(None)
        clash = await db.execute(
            select(Tag.id).where(
                in_scope,
                Tag.tag_name == snapshot["tag_name"],
                Tag.is_active.is_(True),
                Tag.id != snapshot["tag_id"],
            ).limit(1)
        )
        if clash.scalar() is not None:
            raise ValidationError("Tag already exists")

    tag = await _load_or_new(db, Tag, snapshot["tag_id"])
    tag.workspace_id = snapshot["workspace_id"]
    tag.user_id = snapshot["user_id"]
    tag.tag_name = snapshot["tag_name"]
    tag.is_active = snapshot["is_active"]
    tag.created_at = _parse(snapshot["created_at"])
    return tag


async def restore_comment(db: AsyncSession, snapshot: Dict[str, Any]) -> TaskComment:
    comment = await _load_or_new(db, TaskComment, snapshot["comment_id"])
    comment.task_id = snapshot["task_id"]
    comment.user_id = snapshot["user_id"]
    comment.parent_comment_id = snapshot["parent_comment_id"]
    comment.content = snapshot["content"]
    comment.is_deleted = snapshot["is_deleted"]
    comment.created_at = _parse(snapshot["created_at"])
    return comment


RESTORERS: Dict[UndoEntityType, Callable[[AsyncSession, Dict[str, Any]], Awaitable[Any]]] = {
    UndoEntityType.TASK: restore_task,
    UndoEntityType.TASK_LIST: restore_task_list,
    UndoEntityType.TAG: restore_tag,
    UndoEntityType.COMMENT: restore_comment,
}


@dataclass
class UndoResult:
    entity_type: UndoEntityType
    entity_id: int
    data_snapshot: Dict[str, Any]
    created_at: datetime
    entity: Any


def is_expired(entry: UndoLog, now: datetime) -> bool:
    return as_utc(now) - as_utc(entry.created_at) > timedelta(seconds=settings.UNDO_WINDOW_SECONDS)


async def capture_undo(
        db: AsyncSession,
        user_id: int,
        entity_type: UndoEntityType,
        entity,
        now: Optional[datetime] = None,
) -> UndoLog:
    """
    Store the pre-image of entity on the caller's transaction and drop the
    user's entries that can no longer be restored.
    """
    now = now or utc_now()
    await db.execute(
        delete(UndoLog).where(
            UndoLog.user_id == user_id,
            UndoLog.created_at < now - timedelta(seconds=settings.UNDO_WINDOW_SECONDS),
        ).execution_options(synchronize_session=False)
    )

    entry = UndoLog(
        user_id=user_id,
        entity_type=entity_type,
        entity_id=entity.id,
        operation=UndoOperation.DELETE,
        data_snapshot=SNAPSHOTTERS[entity_type](entity),
        created_at=now,
    )
    db.add(entry)
    await db.flush()
    logger.debug(f"Captured undo entry {entry.id} for {entity_type.value}:{entity.id}")
    return entry


async def restore_undo(
        db: AsyncSession,
        undo_id: int,
        user_id: int,
        now: Optional[datetime] = None,
) -> UndoResult:
    """
    Replay an undo entry and consume it.

    Raises NotFound for unknown or already consumed entries, Forbidden when
    the entry belongs to another user and Expired once the window elapsed.
    """
    now = now or utc_now()
    try:
        entry = await db.get(UndoLog, undo_id, populate_existing=True)
        if entry is None:
            raise NotFound("Undo entry not found")
        if entry.user_id != user_id:
            raise Forbidden("Forbidden: not owner of undo entry")
        if is_expired(entry, now):
            raise Expired("Undo entry has expired")

        entity_type = UndoEntityType(entry.entity_type)
        snapshot = dict(entry.data_snapshot)
        entity = await RESTORERS[entity_type](db, snapshot)

        result = UndoResult(
            entity_type=entity_type,
            entity_id=entry.entity_id,
            data_snapshot=snapshot,
            created_at=as_utc(entry.created_at),
            entity=entity,
        )

        await db.delete(entry)
        record_activity(
            db,
            user_id=user_id,
            activity_type="undo_performed",
            task_id=entry.entity_id if entity_type is UndoEntityType.TASK else None,
            details={"entity_type": entity_type.value, "entity_id": entry.entity_id},
        )
        await db.commit()
        logger.info(f"Undo {undo_id} restored {entity_type.value}:{entry.entity_id}")
        return result
    except Exception as e:
        logger.error(f"Undo {undo_id} failed: {e}")
        await db.rollback()
        raise
