"""
Read side for tasks: filtered/sorted/paginated listing of one list and
keyword search over a workspace or the caller's personal lists.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload
from loguru import logger

from app.core.pagination import PaginationParams
from app.db.crud.access import can_access_workspace, get_accessible_list
from app.db.models import (
    SortField, SortOrder, Tag, Task, TaskAssignment, TaskList, TaskPriority, TaskStatus, TaskTag, as_utc,
)
from app.exceptions.domain import Forbidden, ValidationError

PRIORITY_RANK = case(
    (Task.priority == TaskPriority.HIGH, 1),
    (Task.priority == TaskPriority.MEDIUM, 2),
    else_=3,
)


@dataclass
class TaskFilters:
    statuses: Sequence[TaskStatus] = ()
    tag_ids: Sequence[int] = ()
    assigned_user_ids: Sequence[int] = ()
    due_date_start: Optional[datetime] = None
    due_date_end: Optional[datetime] = None

    def conditions(self) -> list:
        clauses = []
        if self.statuses:
            clauses.append(Task.status.in_(list(self.statuses)))
        if self.due_date_start is not None:
            clauses.append(Task.due_datetime >= as_utc(self.due_date_start))
        if self.due_date_end is not None:
            clauses.append(Task.due_datetime <= as_utc(self.due_date_end))
        if self.tag_ids:
            clauses.append(Task.id.in_(
                select(TaskTag.task_id)
                .join(Tag, Tag.id == TaskTag.tag_id)
                .where(TaskTag.tag_id.in_(list(self.tag_ids)), Tag.is_active.is_(True))
            ))
        if self.assigned_user_ids:
            clauses.append(Task.id.in_(
                select(TaskAssignment.task_id).where(TaskAssignment.user_id.in_(list(self.assigned_user_ids)))
            ))
        return clauses


@dataclass
class TaskPage:
    tasks: List[Task]
    total_count: int
    filtered_count: int
    page: PaginationParams = field(default_factory=PaginationParams)


def sort_clauses(sort_by: SortField, sort_order: SortOrder) -> list:
    """
    ORDER BY for a sort key. Deadline keeps undated tasks last in both
    directions; Task.id is the final tie-breaker so equal keys keep
    insertion order.
    """
    descending = sort_order is SortOrder.DESC

    def directed(column):
        return column.desc() if descending else column.asc()

    if sort_by is SortField.DEADLINE:
        clauses = [Task.due_datetime.is_(None).asc(), directed(Task.due_datetime)]
    elif sort_by is SortField.PRIORITY:
        clauses = [directed(PRIORITY_RANK)]
    elif sort_by is SortField.CREATED_AT:
        clauses = [directed(Task.created_at)]
    else:
        clauses = [directed(Task.position_order)]
    return clauses + [Task.id.asc()]


def _with_relations(query):
    return query.options(
        joinedload(Task.task_list),
        selectinload(Task.tags),
        selectinload(Task.assignees),
    )


async def list_tasks(
        db: AsyncSession,
        user_id: int,
        task_list_id: int,
        filters: TaskFilters,
        sort_by: SortField = SortField.CUSTOM,
        sort_order: SortOrder = SortOrder.ASC,
        page: Optional[PaginationParams] = None,
) -> TaskPage:
    """
    Active tasks of one list.

    total_count counts every active task of the list and ignores the
    filters; filtered_count is the exact size of the filtered result.
    """
    page = page or PaginationParams()
    task_list = await get_accessible_list(db, user_id, task_list_id)

    base = [Task.task_list_id == task_list.id, Task.is_active.is_(True)]
    filtered = base + filters.conditions()

    total_count = await db.scalar(select(func.count(Task.id)).where(*base))
    filtered_count = await db.scalar(select(func.count(Task.id)).where(*filtered))

    result = await db.execute(
        _with_relations(select(Task))
        .where(*filtered)
        .order_by(*sort_clauses(sort_by, sort_order))
        .offset(page.offset)
        .limit(page.page_size)
    )
    tasks = list(result.unique().scalars().all())
    logger.debug(f"Listed {len(tasks)} tasks of list {task_list.id} (filtered {filtered_count}/{total_count})")
    return TaskPage(tasks=tasks, total_count=total_count or 0, filtered_count=filtered_count or 0, page=page)


async def search_tasks(
        db: AsyncSession,
        user_id: int,
        keyword: str,
        workspace_id: Optional[int] = None,
        page: Optional[PaginationParams] = None,
) -> TaskPage:
    """Case-insensitive substring match on title/description within one scope."""
    page = page or PaginationParams()
    keyword = (keyword or "").strip()
    if not keyword:
        raise ValidationError("Missing search query parameter q")

    if workspace_id is not None:
        if not await can_access_workspace(db, user_id, workspace_id):
            raise Forbidden("Forbidden: no access to workspace")
        scope = TaskList.workspace_id == workspace_id
    else:
        scope = TaskList.user_id == user_id

    conditions = [
        scope,
        TaskList.is_active.is_(True),
        Task.is_active.is_(True),
        or_(
            Task.title.icontains(keyword, autoescape=True),
            Task.description.icontains(keyword, autoescape=True),
        ),
    ]

    total = await db.scalar(
        select(func.count(Task.id)).join(TaskList, TaskList.id == Task.task_list_id).where(*conditions)
    )
    result = await db.execute(
        _with_relations(select(Task))
        .join(TaskList, TaskList.id == Task.task_list_id)
        .where(*conditions)
        .order_by(Task.position_order.asc(), Task.id.asc())
        .offset(page.offset)
        .limit(page.page_size)
    )
    tasks = list(result.unique().scalars().all())
    return TaskPage(tasks=tasks, total_count=total or 0, filtered_count=total or 0, page=page)
