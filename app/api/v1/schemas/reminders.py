# app/api/v1/schemas/reminders.py
from pydantic import BaseModel
from datetime import datetime

from app.db.models import ReminderType, as_utc


class ReminderCreate(BaseModel):
    reminder_datetime: datetime
    reminder_type: ReminderType


class ReminderResponse(BaseModel):
    reminder_id: int
    task_id: int
    reminder_datetime: datetime
    reminder_type: ReminderType
    is_active: bool
    created_at: datetime

    @classmethod
    def from_model(cls, reminder):
        return cls(
            reminder_id=reminder.id,
            task_id=reminder.task_id,
            reminder_datetime=as_utc(reminder.reminder_datetime),
            reminder_type=reminder.reminder_type,
            is_active=reminder.is_active,
            created_at=as_utc(reminder.created_at),
        )
