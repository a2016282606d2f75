from datetime import datetime, timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.db.crud.access import require_task_access
from app.db.crud.activity import record_activity
from app.db.crud.undo import capture_undo
from app.db.models import Task, TaskComment, TaskList, UndoEntityType, UndoLog, as_utc, utc_now
from app.exceptions.domain import Expired, Forbidden, NotFound, ValidationError


async def list_comments(db: AsyncSession, user_id: int, task_id: int) -> List[TaskComment]:
    await require_task_access(db, user_id, task_id)
    result = await db.execute(
        select(TaskComment)
        .where(TaskComment.task_id == task_id, TaskComment.is_deleted.is_(False))
        .order_by(TaskComment.created_at.asc(), TaskComment.id.asc())
    )
    return list(result.scalars().all())


async def comment_workspace_id(db: AsyncSession, comment: TaskComment) -> Optional[int]:
    """Workspace of the comment's task list, None for personal lists."""
    result = await db.execute(
        select(TaskList.workspace_id)
        .join(Task, Task.task_list_id == TaskList.id)
        .where(Task.id == comment.task_id)
    )
    return result.scalar_one_or_none()


async def add_comment(db: AsyncSession, user_id: int, task_id: int, content: str,
                      parent_comment_id: Optional[int] = None) -> Tuple[TaskComment, Optional[int]]:
    try:
        task = await require_task_access(db, user_id, task_id)
        text = (content or "").strip()
        if not text:
            raise ValidationError("content is required")

        if parent_comment_id is not None:
            parent = await db.get(TaskComment, parent_comment_id)
            if parent is None or parent.task_id != task.id:
                raise ValidationError("Invalid parent_comment_id")

        comment = TaskComment(
            task_id=task.id,
            user_id=user_id,
            parent_comment_id=parent_comment_id,
            content=text,
        )
        db.add(comment)
        await db.flush()
        record_activity(
            db,
            user_id=user_id,
            activity_type="comment_added",
            workspace_id=task.workspace_id,
            task_id=task.id,
            details={"comment_id": comment.id},
        )
        await db.commit()
        logger.info(f"Comment {comment.id} added to task {task.id}")
        return comment, task.workspace_id
    except Exception as e:
        logger.error(f"Failed to add comment to task {task_id}: {e}")
        await db.rollback()
        raise


async def _load_own_comment(db: AsyncSession, user_id: int, comment_id: int) -> TaskComment:
    result = await db.execute(
        select(TaskComment).where(TaskComment.id == comment_id)
    )
    comment = result.scalars().first()
    if comment is None or comment.is_deleted:
        raise NotFound("Comment not found")
    if comment.user_id != user_id:
        raise Forbidden("Forbidden: not comment owner")
    await require_task_access(db, user_id, comment.task_id)
    return comment


def edit_window_elapsed(comment: TaskComment, now: datetime) -> bool:
    window = timedelta(minutes=settings.COMMENT_EDIT_WINDOW_MINUTES)
    return as_utc(now) - as_utc(comment.created_at) > window


async def update_comment(db: AsyncSession, user_id: int, comment_id: int, content: str,
                         now: Optional[datetime] = None) -> Tuple[TaskComment, Optional[int]]:
    """Only the author may edit, and only within the edit window."""
    try:
        comment = await _load_own_comment(db, user_id, comment_id)
        if edit_window_elapsed(comment, now or utc_now()):
            raise Expired(f"Edit window ({settings.COMMENT_EDIT_WINDOW_MINUTES}min) has expired")
        text = (content or "").strip()
        if not text:
            raise ValidationError("content is required")

        comment.content = text
        workspace_id = await comment_workspace_id(db, comment)
        record_activity(
            db,
            user_id=user_id,
            activity_type="comment_updated",
            workspace_id=workspace_id,
            task_id=comment.task_id,
            details={"comment_id": comment.id},
        )
        await db.commit()
        logger.info(f"Comment {comment.id} updated")
        return comment, workspace_id
    except Exception as e:
        logger.error(f"Failed to update comment {comment_id}: {e}")
        await db.rollback()
        raise


async def delete_comment(db: AsyncSession, user_id: int, comment_id: int) -> Tuple[TaskComment, UndoLog, Optional[int]]:
    try:
        comment = await _load_own_comment(db, user_id, comment_id)
        entry = await capture_undo(db, user_id, UndoEntityType.COMMENT, comment)
        comment.is_deleted = True
        workspace_id = await comment_workspace_id(db, comment)
        record_activity(
            db,
            user_id=user_id,
            activity_type="comment_deleted",
            workspace_id=workspace_id,
            task_id=comment.task_id,
            details={"comment_id": comment.id},
        )
        await db.commit()
        logger.info(f"Comment {comment.id} deleted")
        return comment, entry, workspace_id
    except Exception as e:
        logger.error(f"Failed to delete comment {comment_id}: {e}")
        await db.rollback()
        raise
