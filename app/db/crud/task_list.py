from typing import List, Optional, Tuple

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.crud.access import can_access_workspace, get_accessible_list
from app.db.crud.activity import record_activity
from app.db.crud.undo import capture_undo
from app.db.models import Task, TaskList, UndoEntityType, UndoLog, UserWorkspace
from app.exceptions.domain import Forbidden, ValidationError


async def get_user_task_lists(db: AsyncSession, user_id: int) -> List[Tuple[TaskList, int]]:
    """
    Active personal and workspace lists of the user, each paired with the
    number of its active, incomplete tasks.
    """
    incomplete = (
        select(Task.task_list_id, func.count(Task.id).label("incomplete_task_count"))
        .where(Task.is_active.is_(True), Task.is_completed.is_(False))
        .group_by(Task.task_list_id)
        .subquery()
    )
    member_workspaces = select(UserWorkspace.workspace_id).where(
        UserWorkspace.user_id == user_id,
        UserWorkspace.is_active.is_(True),
    )
    result = await db.execute(
        select(TaskList, func.coalesce(incomplete.c.incomplete_task_count, 0))
        .outerjoin(incomplete, incomplete.c.task_list_id == TaskList.id)
        .where(
            TaskList.is_active.is_(True),
            or_(
                and_(TaskList.user_id == user_id, TaskList.workspace_id.is_(None)),
                TaskList.workspace_id.in_(member_workspaces),
            ),
        )
        .order_by(TaskList.position_order.asc(), TaskList.list_name.asc(), TaskList.id.asc())
    )
    return [(task_list, count) for task_list, count in result.all()]


async def get_task_list(db: AsyncSession, user_id: int, task_list_id: int) -> Tuple[TaskList, int]:
    task_list = await get_accessible_list(db, user_id, task_list_id)
    count = await db.scalar(
        select(func.count(Task.id)).where(
            Task.task_list_id == task_list.id,
            Task.is_active.is_(True),
            Task.is_completed.is_(False),
        )
    )
    return task_list, count or 0


async def create_task_list(
        db: AsyncSession,
        requester_id: int,
        list_name: str,
        workspace_id: Optional[int] = None,
        user_id: Optional[int] = None,
        position_order: int = 0,
) -> TaskList:
    """Exactly one of workspace_id / user_id; personal lists only for the requester."""
    try:
        name = (list_name or "").strip()
        if not name:
            raise ValidationError("list_name is required")
        if workspace_id is not None and user_id is not None:
            raise ValidationError("Only one of workspace_id or user_id should be specified")
        if workspace_id is None and user_id is None:
            raise ValidationError("One of workspace_id or user_id is required")

        if workspace_id is not None:
            if not await can_access_workspace(db, requester_id, workspace_id):
                raise Forbidden("Forbidden: no access to workspace")
        elif user_id != requester_id:
            raise Forbidden("Forbidden: cannot create personal list for another user")

        task_list = TaskList(
            workspace_id=workspace_id,
            user_id=user_id,
            list_name=name,
            position_order=position_order,
        )
        db.add(task_list)
        await db.commit()
        await db.refresh(task_list)
        logger.info(f"Task list created: {task_list.id} '{name}'")
        return task_list
    except Exception as e:
        logger.error(f"Failed to create task list: {e}")
        await db.rollback()
        raise


async def _load_list(db: AsyncSession, requester_id: int, task_list_id: int) -> TaskList:
    """Deleted lists only come back through undo."""
    return await get_accessible_list(db, requester_id, task_list_id)


async def _soft_delete(db: AsyncSession, requester_id: int, task_list: TaskList) -> UndoLog:
    entry = await capture_undo(db, requester_id, UndoEntityType.TASK_LIST, task_list)
    task_list.is_active = False
    record_activity(
        db,
        user_id=requester_id,
        activity_type="task_list_deleted",
        workspace_id=task_list.workspace_id,
        details={"task_list_id": task_list.id, "list_name": task_list.list_name},
    )
    return entry


async def update_task_list(
        db: AsyncSession,
        requester_id: int,
        task_list_id: int,
        list_name: Optional[str] = None,
        position_order: Optional[int] = None,
        is_active: Optional[bool] = None,
) -> Tuple[TaskList, Optional[UndoLog]]:
    """is_active=false goes through the soft-delete path and returns its undo entry."""
    try:
        task_list = await _load_list(db, requester_id, task_list_id)
        entry = None

        if list_name is not None:
            name = list_name.strip()
            if not name:
                raise ValidationError("list_name cannot be empty")
            task_list.list_name = name
        if position_order is not None:
            task_list.position_order = position_order
        if is_active is False:
            entry = await _soft_delete(db, requester_id, task_list)

        await db.commit()
        await db.refresh(task_list)
        logger.info(f"Task list updated: {task_list.id}")
        return task_list, entry
    except Exception as e:
        logger.error(f"Failed to update task list {task_list_id}: {e}")
        await db.rollback()
        raise


async def soft_delete_task_list(db: AsyncSession, requester_id: int, task_list_id: int) -> Tuple[TaskList, UndoLog]:
    try:
        task_list = await _load_list(db, requester_id, task_list_id)
        entry = await _soft_delete(db, requester_id, task_list)
        await db.commit()
        logger.info(f"Task list soft-deleted: {task_list.id}")
        return task_list, entry
    except Exception as e:
        logger.error(f"Failed to delete task list {task_list_id}: {e}")
        await db.rollback()
        raise
