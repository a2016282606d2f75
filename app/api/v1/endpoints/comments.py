# app/api/v1/endpoints/comments.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.comments import (
    CommentCreate, CommentDeletedResponse, CommentResponse, CommentUpdate,
)
from app.auth.dependencies import get_current_user
from app.core.realtime import RealtimeBroadcaster, get_broadcaster

router = APIRouter()


@router.get("/{task_id}/comments", response_model=List[CommentResponse])
async def list_comments(
        task_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    comments = await crud.comment.list_comments(db, current_user.id, task_id)
    return [CommentResponse.from_model(comment) for comment in comments]


@router.post("/{task_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
        task_id: int,
        comment_in: CommentCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    comment, workspace_id = await crud.comment.add_comment(
        db, current_user.id, task_id, comment_in.content, comment_in.parent_comment_id
    )
    response = CommentResponse.from_model(comment)
    await broadcaster.comment_added(response.model_dump(mode="json"), workspace_id)
    return response


@router.put("/comments/{comment_id}", response_model=CommentResponse)
async def update_comment(
        comment_id: int,
        comment_in: CommentUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """Authors may edit their comment during the first 15 minutes"""
    comment, workspace_id = await crud.comment.update_comment(db, current_user.id, comment_id, comment_in.content)
    response = CommentResponse.from_model(comment)
    await broadcaster.comment_updated(response.model_dump(mode="json"), workspace_id)
    return response


@router.delete("/comments/{comment_id}", response_model=CommentDeletedResponse)
async def delete_comment(
        comment_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    comment, entry, workspace_id = await crud.comment.delete_comment(db, current_user.id, comment_id)
    await broadcaster.comment_deleted(
        {"comment_id": comment.id, "task_id": comment.task_id, "user_id": comment.user_id},
        workspace_id,
    )
    return CommentDeletedResponse(comment_id=comment.id, undo_id=entry.id)
