# app/api/v1/endpoints/task_lists.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.task_lists import (
    TaskListCreate, TaskListDeletedResponse, TaskListResponse, TaskListUpdate,
)
from app.auth.dependencies import get_current_user

router = APIRouter()


@router.get("", response_model=List[TaskListResponse])
async def list_task_lists(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """Personal and workspace lists with their incomplete task counts"""
    try:
        rows = await crud.task_list.get_user_task_lists(db, current_user.id)
        return [TaskListResponse.from_model(task_list, count) for task_list, count in rows]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to list task lists for user {current_user.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to retrieve task lists")


@router.get("/{task_list_id}", response_model=TaskListResponse)
async def get_task_list(
        task_list_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task_list, count = await crud.task_list.get_task_list(db, current_user.id, task_list_id)
    return TaskListResponse.from_model(task_list, count)


@router.post("", response_model=TaskListResponse, status_code=status.HTTP_201_CREATED)
async def create_task_list(
        list_in: TaskListCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task_list = await crud.task_list.create_task_list(
        db,
        current_user.id,
        list_in.list_name,
        workspace_id=list_in.workspace_id,
        user_id=list_in.user_id,
        position_order=list_in.position_order,
    )
    return TaskListResponse.from_model(task_list)


@router.put("/{task_list_id}", response_model=TaskListResponse)
async def update_task_list(
        task_list_id: int,
        list_in: TaskListUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task_list, entry = await crud.task_list.update_task_list(
        db,
        current_user.id,
        task_list_id,
        list_name=list_in.list_name,
        position_order=list_in.position_order,
        is_active=list_in.is_active,
    )
    return TaskListResponse.from_model(task_list, undo_id=entry.id if entry else None)


@router.delete("/{task_list_id}", response_model=TaskListDeletedResponse)
async def delete_task_list(
        task_list_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    task_list, entry = await crud.task_list.soft_delete_task_list(db, current_user.id, task_list_id)
    return TaskListDeletedResponse(task_list_id=task_list.id, undo_id=entry.id)
