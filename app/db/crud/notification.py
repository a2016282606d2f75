"""
Per-user notification inbox.

Rows are queued on the caller's transaction by notify() and only the
recipient can read or flag them.
"""
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.models import Notification
from app.exceptions.domain import Forbidden, NotFound


def notify(
        db: AsyncSession,
        *,
        user_id: int,
        notification_type: str,
        content: str,
        related_task_id: Optional[int] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        notification_type=notification_type,
        content=content,
        related_task_id=related_task_id,
    )
    db.add(notification)
    return notification


async def list_notifications(
        db: AsyncSession,
        user_id: int,
        is_read: Optional[bool] = None,
        offset: int = 0,
        limit: int = 25,
) -> Tuple[List[Notification], int]:
    conditions = [Notification.user_id == user_id]
    if is_read is not None:
        conditions.append(Notification.is_read.is_(is_read))

    total = await db.scalar(select(func.count(Notification.id)).where(*conditions))
    result = await db.execute(
        select(Notification)
        .where(*conditions)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


async def mark_read(db: AsyncSession, user_id: int, notification_id: int, is_read: bool) -> Notification:
    try:
        notification = await db.get(Notification, notification_id)
        if notification is None:
            raise NotFound("Notification not found")
        if notification.user_id != user_id:
            raise Forbidden("Forbidden: notification does not belong to user")

        notification.is_read = is_read
        await db.commit()
        await db.refresh(notification)
        return notification
    except Exception as e:
        logger.error(f"Failed to update notification {notification_id}: {e}")
        await db.rollback()
        raise
