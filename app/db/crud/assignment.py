"""
Assignee sets of tasks.

Requested user ids are filtered against the task's list scope; ids that
could not see the list are dropped without error. The task creator stays
assigned through replace_assignees no matter what the caller sends.
"""
from typing import Iterable, List, Set

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.crud.access import user_is_assignable
from app.db.models import Task, TaskAssignment, TaskList, User


def _unique(ids: Iterable[int]) -> List[int]:
    seen = set()
    ordered = []
    for user_id in ids:
        if user_id not in seen:
            seen.add(user_id)
            ordered.append(user_id)
    return ordered


async def current_assignee_ids(db: AsyncSession, task_id: int) -> Set[int]:
    result = await db.execute(select(TaskAssignment.user_id).where(TaskAssignment.task_id == task_id))
    return set(result.scalars().all())


async def filter_assignable(db: AsyncSession, task_list: TaskList, user_ids: Iterable[int]) -> List[int]:
    allowed = []
    for user_id in _unique(user_ids):
        if await user_is_assignable(db, user_id, task_list):
            allowed.append(user_id)
        else:
            logger.debug(f"Skipping unassignable user {user_id} for list {task_list.id}")
    return allowed


async def replace_assignees(db: AsyncSession, task: Task, requested_user_ids: Iterable[int]) -> List[int]:
    """
    Make the assignee set equal to the accessible requested ids plus the
    creator. Returns the final set, creator first.
    """
    final_ids = _unique([task.created_by_user_id] + await filter_assignable(db, task.task_list, requested_user_ids))
    current = await current_assignee_ids(db, task.id)

    to_remove = current - set(final_ids) - {task.created_by_user_id}
    if to_remove:
        await db.execute(
            delete(TaskAssignment).where(
                TaskAssignment.task_id == task.id,
                TaskAssignment.user_id.in_(to_remove),
            )
        )
    for user_id in final_ids:
        if user_id not in current:
            db.add(TaskAssignment(task_id=task.id, user_id=user_id))
    await db.flush()
    return final_ids


async def add_assignees(db: AsyncSession, task: Task, user_ids: Iterable[int]) -> List[int]:
    """Additive variant: returns the accessible ids among user_ids."""
    valid_ids = await filter_assignable(db, task.task_list, user_ids)
    current = await current_assignee_ids(db, task.id)
    for user_id in valid_ids:
        if user_id not in current:
            db.add(TaskAssignment(task_id=task.id, user_id=user_id))
    await db.flush()
    return valid_ids


async def remove_assignees(db: AsyncSession, task_id: int, user_ids: Iterable[int]) -> int:
    user_ids = list(user_ids)
    if not user_ids:
        return 0
    result = await db.execute(
        delete(TaskAssignment).where(
            TaskAssignment.task_id == task_id,
            TaskAssignment.user_id.in_(user_ids),
        )
    )
    return result.rowcount or 0


async def remove_assignee(db: AsyncSession, task_id: int, user_id: int) -> bool:
    """Subtractive variant for a single user; False when no such assignment exists."""
    return await remove_assignees(db, task_id, [user_id]) > 0


async def list_assignees(db: AsyncSession, task_id: int) -> List[User]:
    result = await db.execute(
        select(User)
        .join(TaskAssignment, TaskAssignment.user_id == User.id)
        .where(TaskAssignment.task_id == task_id)
        .order_by(User.id)
    )
    return list(result.scalars().all())
