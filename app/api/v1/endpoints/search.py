# app/api/v1/endpoints/search.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.tasks import TaskPageResponse, TaskResponse
from app.auth.dependencies import get_current_user
from app.core.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("/tasks", response_model=TaskPageResponse)
async def search_tasks(
        q: Optional[str] = Query(None, description="Keyword matched against title and description"),
        workspace_id: Optional[int] = Query(None, description="Search a workspace instead of personal lists"),
        page: PaginationParams = Depends(pagination_params),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    result = await crud.query.search_tasks(db, current_user.id, q, workspace_id, page)
    return TaskPageResponse(
        tasks=[TaskResponse.from_model(task) for task in result.tasks],
        total_count=result.total_count,
        filtered_count=result.filtered_count,
        page=page.page,
        page_size=page.page_size,
    )
