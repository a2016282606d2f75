# app/api/v1/endpoints/notifications.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.notifications import (
    NotificationPageResponse, NotificationReadUpdate, NotificationResponse,
)
from app.auth.dependencies import get_current_user
from app.core.pagination import PaginationParams, pagination_params

router = APIRouter()


@router.get("", response_model=NotificationPageResponse)
async def list_notifications(
        is_read: Optional[bool] = Query(None),
        page: PaginationParams = Depends(pagination_params),
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """The caller's inbox, newest first"""
    notifications, total = await crud.notification.list_notifications(
        db, current_user.id, is_read=is_read, offset=page.offset, limit=page.page_size
    )
    return NotificationPageResponse(
        notifications=[NotificationResponse.from_model(item) for item in notifications],
        total_count=total,
        page=page.page,
        page_size=page.page_size,
    )


@router.put("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification(
        notification_id: int,
        read_in: NotificationReadUpdate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    notification = await crud.notification.mark_read(db, current_user.id, notification_id, read_in.is_read)
    return NotificationResponse.from_model(notification)
