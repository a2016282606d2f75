# app/api/v1/endpoints/tasks.py
"""Task endpoints: CRUD, bulk update, assignments and tag links"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.database import get_db
from app.db import crud
from app.db.crud.query import TaskFilters
from app.db.models import SortField, SortOrder, TaskStatus, User
from app.api.v1.schemas.tasks import (
    AssignedUser, AssignmentRequest, BulkUpdateResponse, TagAttachRequest, TaskBulkUpdate,
    TaskCreate, TaskDeletedResponse, TaskPageResponse, TaskResponse, TaskTagItem, TaskUpdate,
)
from app.auth.dependencies import get_current_user
from app.core.pagination import PaginationParams, pagination_params
from app.core.realtime import RealtimeBroadcaster, get_broadcaster
from app.exceptions.domain import NotFound, ValidationError

router = APIRouter()


def split_values(values: Optional[List[str]]) -> List[str]:
    """Query lists arrive repeated (?x=1&x=2) or comma-joined (?x=1,2)."""
    items = []
    for value in values or []:
        items.extend(part.strip() for part in value.split(","))
    return [item for item in items if item]


def parse_ids(values: Optional[List[str]], name: str) -> List[int]:
    try:
        return [int(value) for value in split_values(values)]
    except ValueError:
        raise ValidationError(f"Invalid {name}: expected integer ids")


def parse_statuses(values: Optional[List[str]]) -> List[TaskStatus]:
    try:
        return [TaskStatus(value) for value in split_values(values)]
    except ValueError:
        raise ValidationError("Invalid status value")


@router.get("", response_model=TaskPageResponse)
async def list_tasks(
        task_list_id: int = Query(..., description="List to read"),
        task_status: Optional[List[str]] = Query(None, alias="status"),
        tags: Optional[List[str]] = Query(None, description="Tag ids"),
        assigned_user_ids: Optional[List[str]] = Query(None),
        due_date_start: Optional[datetime] = Query(None),
        due_date_end: Optional[datetime] = Query(None),
        sort_by: str = Query(SortField.CUSTOM.value),
        sort_order: str = Query(SortOrder.ASC.value),
        page: PaginationParams = Depends(pagination_params),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """List active tasks of a list; unknown sort keys fall back to custom/asc"""
    try:
        filters = TaskFilters(
            statuses=parse_statuses(task_status),
            tag_ids=parse_ids(tags, "tags"),
            assigned_user_ids=parse_ids(assigned_user_ids, "assigned_user_ids"),
            due_date_start=due_date_start,
            due_date_end=due_date_end,
        )
        sort_field = SortField(sort_by) if sort_by in SortField._value2member_map_ else SortField.CUSTOM
        direction = SortOrder(sort_order) if sort_order in SortOrder._value2member_map_ else SortOrder.ASC

        result = await crud.query.list_tasks(db, current_user.id, task_list_id, filters, sort_field, direction, page)
        return TaskPageResponse(
            tasks=[TaskResponse.from_model(task) for task in result.tasks],
            total_count=result.total_count,
            filtered_count=result.filtered_count,
            page=page.page,
            page_size=page.page_size,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list tasks of list {task_list_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve tasks")


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
        task_in: TaskCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    try:
        task = await crud.task.create_task(db, current_user, task_in)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create task: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create task")

    response = TaskResponse.from_model(task)
    await broadcaster.task_created(response.model_dump(mode="json"), task.task_list.workspace_id, [current_user.id])
    return response


@router.post("/bulk_update", response_model=BulkUpdateResponse)
async def bulk_update_tasks(
        bulk_in: TaskBulkUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """Inaccessible ids are skipped; the rest are applied together"""
    try:
        tasks = await crud.task.bulk_update_tasks(db, current_user, bulk_in)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Bulk update failed: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to bulk update tasks")

    responses = [TaskResponse.from_model(task) for task in tasks]
    for task, response in zip(tasks, responses):
        await broadcaster.task_updated(response.model_dump(mode="json"), task.task_list.workspace_id)
    return BulkUpdateResponse(updated_tasks=responses)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
        task_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task = await crud.task.get_task_for_user(db, current_user.id, task_id)
    return TaskResponse.from_model(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
        task_id: int,
        task_in: TaskUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """
    Partial update. Sending is_active=false soft-deletes only this task
    (subtasks stay active) and returns the row with an undo_id; use DELETE
    to remove a whole subtree.
    """
    try:
        result = await crud.task.update_task(db, current_user, task_id, task_in)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update task")

    task = await crud.task.get_task_detail(db, result.task.id)
    if result.deleted:
        response = TaskResponse.from_model(task, undo_id=result.undo_entry.id)
        await broadcaster.task_deleted(
            {"task_id": task.id, "task_list_id": task.task_list_id, "deleted_task_ids": [task.id]},
            task.task_list.workspace_id,
        )
        return response

    response = TaskResponse.from_model(task)
    await broadcaster.task_updated(response.model_dump(mode="json"), task.task_list.workspace_id)
    return response


@router.delete("/{task_id}", response_model=TaskDeletedResponse)
async def delete_task(
        task_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """Soft-delete the task and every descendant; undo restores the task itself"""
    try:
        result = await crud.task.soft_delete_task(db, current_user, task_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to delete task")

    await broadcaster.task_deleted(
        {
            "task_id": result.task.id,
            "task_list_id": result.task.task_list_id,
            "deleted_task_ids": result.deleted_ids,
        },
        result.task.task_list.workspace_id,
    )
    return TaskDeletedResponse(task_id=result.task.id, deleted_task_ids=result.deleted_ids, undo_id=result.undo_entry.id)


# Assignments

@router.get("/{task_id}/assignments", response_model=List[AssignedUser])
async def list_assignments(
        task_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    await crud.access.require_task_access(db, current_user.id, task_id)
    users = await crud.assignment.list_assignees(db, task_id)
    return [AssignedUser.from_model(user) for user in users]


@router.post("/{task_id}/assignments", response_model=List[AssignedUser])
async def add_assignments(
        task_id: int,
        assignment_in: AssignmentRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """Add users who can see the task's list; others are ignored"""
    try:
        task = await crud.access.require_task_access(db, current_user.id, task_id)
        before = await crud.assignment.current_assignee_ids(db, task.id)
        added = await crud.assignment.add_assignees(db, task, assignment_in.user_ids)
        for user_id in added:
            if user_id not in before and user_id != current_user.id:
                crud.notification.notify(
                    db,
                    user_id=user_id,
                    notification_type="assignment",
                    content=f"{current_user.full_name or current_user.email} assigned you to '{task.title}'",
                    related_task_id=task.id,
                )
        crud.activity.record_activity(
            db,
            user_id=current_user.id,
            activity_type="assignment_changed",
            workspace_id=task.workspace_id,
            task_id=task.id,
            details={"added_user_ids": added},
        )
        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to add assignments to task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to assign users")

    users = await crud.assignment.list_assignees(db, task_id)
    await broadcaster.task_assignment_changed(task_id, [user.id for user in users], task.task_list.workspace_id)
    return [AssignedUser.from_model(user) for user in users]


@router.delete("/{task_id}/assignments/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_assignment(
        task_id: int,
        user_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    try:
        task = await crud.access.require_task_access(db, current_user.id, task_id)
        if not await crud.assignment.remove_assignee(db, task_id, user_id):
            raise NotFound("Assignment not found")
        crud.activity.record_activity(
            db,
            user_id=current_user.id,
            activity_type="assignment_changed",
            workspace_id=task.workspace_id,
            task_id=task.id,
            details={"removed_user_id": user_id},
        )
        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to remove assignment {user_id} from task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to remove assignment")

    remaining = sorted(await crud.assignment.current_assignee_ids(db, task_id))
    await broadcaster.task_assignment_changed(task_id, remaining, task.task_list.workspace_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Tag links

@router.post("/{task_id}/tags", response_model=List[TaskTagItem])
async def attach_tags(
        task_id: int,
        attach_in: TagAttachRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """Link existing tags of the list's scope; other ids are skipped"""
    try:
        task = await crud.access.require_task_access(db, current_user.id, task_id)
        await crud.tag.attach_tags(db, task, attach_in.tag_ids)
        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except Exception as e:
        await db.rollback()
        logger.error(f"Failed to attach tags to task {task_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to attach tags")

    tags = await crud.tag.active_tags_for_task(db, task_id)
    return [TaskTagItem(tag_id=tag.id, tag_name=tag.tag_name) for tag in tags]


@router.delete("/{task_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def detach_tag(
        task_id: int,
        tag_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task = await crud.access.require_task_access(db, current_user.id, task_id)
    await crud.tag.detach_tag(db, task, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
