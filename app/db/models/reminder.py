# app/db/models/reminder.py
from sqlalchemy import Column, Integer, Boolean, ForeignKey, Enum, DateTime

from app.db.models.base import Base, TimestampMixin, IDMixin
from app.db.models.enums import ReminderType, enum_values


class TaskReminder(Base, IDMixin, TimestampMixin):
    """A point in time at which the task should be brought to its owner's attention"""
    __tablename__ = "task_reminders"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    reminder_datetime = Column(DateTime(timezone=True), nullable=False)
    reminder_type = Column(
        Enum(ReminderType, name="reminder_type", values_callable=enum_values),
        nullable=False,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<TaskReminder task_id={self.task_id} type={self.reminder_type}>"
