# app/api/v1/endpoints/tags.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.crud.tag import validate_scope
from app.db.models import User
from app.api.v1.schemas.tags import TagCreate, TagDeletedResponse, TagResponse, TagUpdate
from app.auth.dependencies import get_current_user

router = APIRouter()


@router.get("", response_model=List[TagResponse])
async def list_tags(
        workspace_id: Optional[int] = Query(None),
        user_id: Optional[int] = Query(None),
        is_active: Optional[bool] = Query(None),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """Tags of exactly one scope"""
    scope = validate_scope(workspace_id, user_id)
    tags = await crud.tag.list_tags(db, current_user.id, scope, is_active)
    return [TagResponse.from_model(tag) for tag in tags]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(
        tag_in: TagCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    tag = await crud.tag.create_tag(
        db, current_user.id, tag_in.tag_name, workspace_id=tag_in.workspace_id, user_id=tag_in.user_id
    )
    return TagResponse.from_model(tag)


@router.put("/{tag_id}", response_model=TagResponse)
async def update_tag(
        tag_id: int,
        tag_in: TagUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    tag = await crud.tag.update_tag(db, current_user.id, tag_id, tag_name=tag_in.tag_name, is_active=tag_in.is_active)
    return TagResponse.from_model(tag)


@router.delete("/{tag_id}", response_model=TagDeletedResponse)
async def delete_tag(
        tag_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    tag, entry = await crud.tag.soft_delete_tag(db, current_user.id, tag_id)
    return TagDeletedResponse(tag_id=tag.id, undo_id=entry.id)
