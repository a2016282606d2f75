from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import ActivityLog


def record_activity(
        db: AsyncSession,
        *,
        user_id: int,
        activity_type: str,
        workspace_id: Optional[int] = None,
        task_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
) -> ActivityLog:
    """
    Queue an audit row on the caller's transaction. The row is written when
    the surrounding mutation commits and discarded if it rolls back.
    """
    entry = ActivityLog(
        user_id=user_id,
        workspace_id=workspace_id,
        task_id=task_id,
        activity_type=activity_type,
        details=details,
    )
    db.add(entry)
    return entry


async def list_activity_logs(
        db: AsyncSession,
        *,
        user_id: int,
        workspace_id: Optional[int] = None,
        task_id: Optional[int] = None,
        offset: int = 0,
        limit: int = 25,
) -> Tuple[List[ActivityLog], int]:
    """Newest-first activity; without a workspace or task filter only the caller's own rows."""
    conditions = []
    if workspace_id is not None:
        conditions.append(ActivityLog.workspace_id == workspace_id)
    if task_id is not None:
        conditions.append(ActivityLog.task_id == task_id)
    if not conditions:
        conditions.append(ActivityLog.user_id == user_id)

    total = await db.scalar(select(func.count(ActivityLog.id)).where(*conditions))
    result = await db.execute(
        select(ActivityLog)
        .where(*conditions)
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0
