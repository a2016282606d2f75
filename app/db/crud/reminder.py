from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.crud.access import require_task_access
from app.db.models import ReminderType, TaskReminder


async def create_reminder(db: AsyncSession, user_id: int, task_id: int,
                          reminder_datetime: datetime, reminder_type: ReminderType) -> TaskReminder:
    """Schedule a reminder on a task the user can access."""
    try:
        task = await require_task_access(db, user_id, task_id)
        reminder = TaskReminder(
            task_id=task.id,
            reminder_datetime=reminder_datetime,
            reminder_type=reminder_type,
        )
        db.add(reminder)
        await db.commit()
        await db.refresh(reminder)
        logger.info(f"Reminder {reminder.id} ({reminder_type.value}) set on task {task.id}")
        return reminder
    except Exception as e:
        logger.error(f"Failed to create reminder on task {task_id}: {e}")
        await db.rollback()
        raise
