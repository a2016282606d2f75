"""
Ownership and membership checks shared by every mutation path.

A list (or tag) is owned by exactly one scope: a workspace, whose active
members may touch it, or a single user. Everything else in the core asks
these helpers before reading or writing.
"""
import enum
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload
from loguru import logger

from app.db.models import Task, TaskList, UserWorkspace
from app.exceptions.domain import Forbidden, InvalidOwner, NotFound, ValidationError


class ListAccess(str, enum.Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    INVALID_OWNER = "invalid_owner"


async def can_access_workspace(db: AsyncSession, user_id: int, workspace_id: int) -> bool:
    """True iff the user has an active membership row in the workspace."""
    result = await db.execute(
        select(UserWorkspace.user_id).where(
            UserWorkspace.user_id == user_id,
            UserWorkspace.workspace_id == workspace_id,
            UserWorkspace.is_active.is_(True),
        ).limit(1)
    )
    return result.first() is not None


async def resolve_list_access(db: AsyncSession, user_id: int, task_list: TaskList) -> ListAccess:
    if task_list.workspace_id is not None:
        if await can_access_workspace(db, user_id, task_list.workspace_id):
            return ListAccess.ALLOWED
        return ListAccess.FORBIDDEN
    if task_list.user_id is not None:
        return ListAccess.ALLOWED if task_list.user_id == user_id else ListAccess.FORBIDDEN
    return ListAccess.INVALID_OWNER


async def require_list_access(db: AsyncSession, user_id: int, task_list: TaskList) -> None:
    """Raise Forbidden or InvalidOwner unless the user may use the list."""
    access = await resolve_list_access(db, user_id, task_list)
    if access is ListAccess.INVALID_OWNER:
        logger.error(f"Task list {task_list.id} has no owner")
        raise InvalidOwner()
    if access is ListAccess.FORBIDDEN:
        logger.warning(f"User {user_id} denied access to task list {task_list.id}")
        if task_list.workspace_id is not None:
            raise Forbidden("Forbidden: no access to workspace")
        raise Forbidden("Forbidden: no access to personal list")


async def get_active_list(db: AsyncSession, list_id: int) -> Optional[TaskList]:
    result = await db.execute(
        select(TaskList).where(TaskList.id == list_id, TaskList.is_active.is_(True))
    )
    return result.scalars().first()


async def get_accessible_list(db: AsyncSession, user_id: int, list_id: int, *, missing_as_invalid: bool = False) -> TaskList:
    """
    Load an active list the user can access.

    A missing or inactive list is NotFound when reading it directly, and a
    ValidationError when it was referenced from a payload (task creation).
    """
    task_list = await get_active_list(db, list_id)
    if task_list is None:
        if missing_as_invalid:
            raise ValidationError("Invalid task_list_id or inactive list")
        raise NotFound("Task list not found")
    await require_list_access(db, user_id, task_list)
    return task_list


async def resolve_task_access(db: AsyncSession, user_id: int, task_id: int) -> Optional[Task]:
    """
    Return the active task with its (active) list loaded, or None when the
    task is missing, inactive, sits in an inactive list, or belongs to a
    scope the user cannot access.
    """
    result = await db.execute(
        select(Task)
        .join(TaskList, Task.task_list_id == TaskList.id)
        .options(joinedload(Task.task_list))
        .where(Task.id == task_id, Task.is_active.is_(True), TaskList.is_active.is_(True))
    )
    task = result.scalars().first()
    if task is None:
        return None

    access = await resolve_list_access(db, user_id, task.task_list)
    if access is ListAccess.INVALID_OWNER:
        raise InvalidOwner()
    if access is ListAccess.FORBIDDEN:
        logger.warning(f"User {user_id} denied access to task {task_id}")
        return None
    return task


async def require_task_access(db: AsyncSession, user_id: int, task_id: int) -> Task:
    task = await resolve_task_access(db, user_id, task_id)
    if task is None:
        raise NotFound("Task not found or no access")
    return task


async def user_is_assignable(db: AsyncSession, user_id: int, task_list: TaskList) -> bool:
    """Whether user_id may be assigned to tasks in task_list."""
    if task_list.workspace_id is not None:
        return await can_access_workspace(db, user_id, task_list.workspace_id)
    if task_list.user_id is not None:
        return task_list.user_id == user_id
    return False
