# app/db/crud/task.py
"""
Task hierarchy store: create, update, soft delete (single and cascading)
and bulk update. Every public function owns its transaction.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.orm import joinedload, selectinload
from loguru import logger

from app.db.crud.access import get_accessible_list, require_task_access, resolve_task_access
from app.db.crud.activity import record_activity
from app.db.crud.assignment import add_assignees, remove_assignees, replace_assignees
from app.db.crud.tag import TagScope, link_tags, replace_task_tags, resolve_tags, unlink_tags
from app.db.crud.undo import capture_undo
from app.db.models import (
    Task, TaskPriority, TaskStatus, UndoEntityType, UndoLog, User, as_utc, utc_now,
)
from app.exceptions.domain import ValidationError
from app.api.v1.schemas.tasks import TaskBulkUpdate, TaskCreate, TaskUpdate

# Columns a PUT may set directly; tags and assigned_user_ids go through their resolvers
DIRECT_UPDATE_FIELDS = (
    "parent_task_id", "title", "description", "priority", "due_datetime",
    "estimated_effort_mins", "status", "is_completed", "position_order",
    "recurring_pattern", "recurrence_end_date", "recurrence_count",
)
NON_NULLABLE_FIELDS = {"title", "priority", "status", "is_completed", "position_order"}
DATETIME_FIELDS = {"due_datetime", "recurrence_end_date"}


@dataclass
class TaskUpdateResult:
    task: Task
    deleted: bool = False
    undo_entry: Optional[UndoLog] = None


@dataclass
class TaskDeleteResult:
    task: Task
    undo_entry: UndoLog
    deleted_ids: List[int] = field(default_factory=list)


async def get_task_detail(db: AsyncSession, task_id: int) -> Optional[Task]:
    """Task with list, tags and assignees freshly loaded."""
    result = await db.execute(
        select(Task)
        .options(
            joinedload(Task.task_list),
            selectinload(Task.tags),
            selectinload(Task.assignees),
        )
        .where(Task.id == task_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_task_for_user(db: AsyncSession, user_id: int, task_id: int) -> Task:
    await require_task_access(db, user_id, task_id)
    return await get_task_detail(db, task_id)


async def _validate_parent(db: AsyncSession, task_list_id: int, parent_task_id: int,
                           task_id: Optional[int] = None) -> None:
    """The parent must be an active task of the same list and must not close a cycle."""
    parent = await db.get(Task, parent_task_id)
    if parent is None or not parent.is_active or parent.task_list_id != task_list_id:
        raise ValidationError("Invalid parent_task_id")
    if task_id is None:
        return

    seen: Set[int] = set()
    current = parent
    while current is not None and current.id not in seen:
        if current.id == task_id:
            raise ValidationError("parent_task_id would create a cycle")
        seen.add(current.id)
        current = await db.get(Task, current.parent_task_id) if current.parent_task_id else None


async def collect_subtree_ids(db: AsyncSession, root: Task) -> List[int]:
    """
    Breadth-first walk over the list's parent/child index starting at root.
    The visited set keeps a malformed parent chain from looping.
    """
    result = await db.execute(
        select(Task.id, Task.parent_task_id).where(Task.task_list_id == root.task_list_id)
    )
    children: Dict[int, List[int]] = {}
    for node_id, parent_id in result.all():
        if parent_id is not None:
            children.setdefault(parent_id, []).append(node_id)

    ordered: List[int] = []
    visited: Set[int] = set()
    frontier = [root.id]
    while frontier:
        next_frontier = []
        for node_id in frontier:
            if node_id in visited:
                continue
            visited.add(node_id)
            ordered.append(node_id)
            next_frontier.extend(children.get(node_id, ()))
        frontier = next_frontier
    return ordered


def _normalize(field_name: str, value: Any) -> Any:
    if field_name in DATETIME_FIELDS:
        return as_utc(value)
    return value


async def create_task(db: AsyncSession, user: User, task_in: TaskCreate) -> Task:
    """
    Insert a task, link its tags and assignees (creator always included)
    and record task_created.
    """
    try:
        title = (task_in.title or "").strip()
        if not title:
            raise ValidationError("title is required")

        task_list = await get_accessible_list(db, user.id, task_in.task_list_id, missing_as_invalid=True)
        if task_in.parent_task_id is not None:
            await _validate_parent(db, task_list.id, task_in.parent_task_id)

        task = Task(
            task_list_id=task_list.id,
            parent_task_id=task_in.parent_task_id,
            title=title,
            description=task_in.description,
            priority=task_in.priority or TaskPriority.MEDIUM,
            status=task_in.status or TaskStatus.PENDING,
            is_completed=bool(task_in.is_completed),
            due_datetime=as_utc(task_in.due_datetime),
            estimated_effort_mins=task_in.estimated_effort_mins,
            position_order=task_in.position_order or 0,
            recurring_pattern=task_in.recurring_pattern,
            recurrence_end_date=as_utc(task_in.recurrence_end_date),
            recurrence_count=task_in.recurrence_count,
            created_by_user_id=user.id,
        )
        task.task_list = task_list
        db.add(task)
        await db.flush()

        if task_in.tags:
            tag_ids = await resolve_tags(db, TagScope.of_list(task_list), task_in.tags)
            await link_tags(db, task.id, tag_ids)
        await replace_assignees(db, task, task_in.assigned_user_ids or [])

        record_activity(
            db,
            user_id=user.id,
            activity_type="task_created",
            workspace_id=task_list.workspace_id,
            task_id=task.id,
            details={"title": title},
        )
        await db.commit()
        logger.info(f"Task created: {task.id} in list {task_list.id}")
        return await get_task_detail(db, task.id)
    except Exception as e:
        logger.error(f"Failed to create task: {e}")
        await db.rollback()
        raise


async def _soft_delete_single(db: AsyncSession, user: User, task: Task) -> UndoLog:
    entry = await capture_undo(db, user.id, UndoEntityType.TASK, task)
    task.is_active = False
    record_activity(
        db,
        user_id=user.id,
        activity_type="task_deleted",
        workspace_id=task.workspace_id,
        task_id=task.id,
        details={"title": task.title, "cascade": False},
    )
    return entry


async def update_task(db: AsyncSession, user: User, task_id: int, task_in: TaskUpdate) -> TaskUpdateResult:
    """
    Apply a partial update.

    is_active=false soft-deletes this task only (descendants untouched) and
    ignores every other field of the patch. tags is a full replace;
    assigned_user_ids replaces the set but keeps the creator.
    """
    try:
        task = await require_task_access(db, user.id, task_id)
        changes = task_in.model_dump(exclude_unset=True)

        if changes.get("is_active") is False:
            entry = await _soft_delete_single(db, user, task)
            await db.commit()
            logger.info(f"Task soft-deleted via update: {task.id}")
            return TaskUpdateResult(task=task, deleted=True, undo_entry=entry)

        for field_name in DIRECT_UPDATE_FIELDS:
            if field_name not in changes:
                continue
            value = changes[field_name]
            if value is None and field_name in NON_NULLABLE_FIELDS:
                raise ValidationError(f"{field_name} cannot be null")
            if field_name == "title":
                value = value.strip()
                if not value:
                    raise ValidationError("title cannot be empty")
            if field_name == "parent_task_id" and value is not None:
                await _validate_parent(db, task.task_list_id, value, task_id=task.id)
            setattr(task, field_name, _normalize(field_name, value))

        if "tags" in changes:
            await replace_task_tags(db, task, changes["tags"] or [])
        if "assigned_user_ids" in changes:
            await replace_assignees(db, task, changes["assigned_user_ids"] or [])

        record_activity(
            db,
            user_id=user.id,
            activity_type="task_updated",
            workspace_id=task.workspace_id,
            task_id=task.id,
            details={"updated_fields": task_in.model_dump(mode="json", exclude_unset=True)},
        )
        await db.commit()
        logger.info(f"Task updated: {task.id} fields={sorted(changes)}")
        return TaskUpdateResult(task=await get_task_detail(db, task.id))
    except Exception as e:
        logger.error(f"Failed to update task {task_id}: {e}")
        await db.rollback()
        raise


async def soft_delete_task(db: AsyncSession, user: User, task_id: int) -> TaskDeleteResult:
    """
    Soft-delete a task and all of its descendants in one transaction. Only
    the root gets an undo entry, so undo brings back the root alone.
    """
    try:
        task = await require_task_access(db, user.id, task_id)
        subtree_ids = await collect_subtree_ids(db, task)

        entry = await capture_undo(db, user.id, UndoEntityType.TASK, task)
        await db.execute(
            update(Task)
            .where(Task.id.in_(subtree_ids))
            .values(is_active=False, updated_at=utc_now())
            .execution_options(synchronize_session="fetch")
        )
        task.is_active = False

        record_activity(
            db,
            user_id=user.id,
            activity_type="task_deleted",
            workspace_id=task.workspace_id,
            task_id=task.id,
            details={"title": task.title, "cascade": True, "deleted_task_ids": subtree_ids},
        )
        await db.commit()
        logger.info(f"Task {task.id} soft-deleted with {len(subtree_ids) - 1} descendants")
        return TaskDeleteResult(task=task, undo_entry=entry, deleted_ids=subtree_ids)
    except Exception as e:
        logger.error(f"Failed to delete task {task_id}: {e}")
        await db.rollback()
        raise


async def bulk_update_tasks(db: AsyncSession, user: User, bulk_in: TaskBulkUpdate) -> List[Task]:
    """
    Best-effort per item, one transaction: ids the user cannot reach are
    skipped, the rest are updated and committed together.
    """
    try:
        updated_ids: List[int] = []
        for task_id in dict.fromkeys(bulk_in.task_ids):
            task = await resolve_task_access(db, user.id, task_id)
            if task is None:
                logger.debug(f"Bulk update skipping inaccessible task {task_id}")
                continue

            if bulk_in.status is not None:
                task.status = bulk_in.status
            if bulk_in.is_completed is not None:
                task.is_completed = bulk_in.is_completed
            if bulk_in.is_active is not None:
                task.is_active = bulk_in.is_active

            if bulk_in.add_tag_ids:
                tag_ids = await resolve_tags(db, TagScope.of_list(task.task_list), bulk_in.add_tag_ids)
                await link_tags(db, task.id, tag_ids)
            if bulk_in.remove_tag_ids:
                await unlink_tags(db, task.id, bulk_in.remove_tag_ids)
            if bulk_in.assign_user_ids:
                await add_assignees(db, task, bulk_in.assign_user_ids)
            if bulk_in.unassign_user_ids:
                await remove_assignees(db, task.id, bulk_in.unassign_user_ids)

            updated_ids.append(task.id)

        await db.commit()
        logger.info(f"Bulk update applied to {len(updated_ids)} of {len(bulk_in.task_ids)} tasks")
        return [await get_task_detail(db, task_id) for task_id in updated_ids]
    except Exception as e:
        logger.error(f"Bulk update failed: {e}")
        await db.rollback()
        raise

