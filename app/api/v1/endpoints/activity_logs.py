# app/api/v1/endpoints/activity_logs.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.activity import ActivityPageResponse, ActivityResponse
from app.auth.dependencies import get_current_user
from app.core.pagination import PaginationParams, pagination_params
from app.exceptions.domain import Forbidden

router = APIRouter()


@router.get("", response_model=ActivityPageResponse)
async def list_activity_logs(
        workspace_id: Optional[int] = Query(None),
        task_id: Optional[int] = Query(None),
        page: PaginationParams = Depends(pagination_params),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    if workspace_id is not None and not await crud.access.can_access_workspace(db, current_user.id, workspace_id):
        raise Forbidden("Forbidden: no access to workspace")
    if task_id is not None:
        await crud.access.require_task_access(db, current_user.id, task_id)

    entries, total = await crud.activity.list_activity_logs(
        db,
        user_id=current_user.id,
        workspace_id=workspace_id,
        task_id=task_id,
        offset=page.offset,
        limit=page.page_size,
    )
    return ActivityPageResponse(
        activities=[ActivityResponse.from_model(entry) for entry in entries],
        total_count=total,
        page=page.page,
        page_size=page.page_size,
    )
