# app/db/models/task.py
"""Task model and its tag/assignment junctions"""
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index, Enum, DateTime
from sqlalchemy.orm import relationship

from app.db.models.base import Base, TimestampMixin, IDMixin
from app.db.models.enums import TaskPriority, TaskStatus, enum_values


class Task(Base, IDMixin, TimestampMixin):
    """Task node; parent_task_id links it to a parent in the same list"""
    __tablename__ = "tasks"

    task_list_id = Column(Integer, ForeignKey("task_lists.id", ondelete="CASCADE"), nullable=False)
    parent_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(
        Enum(TaskPriority, name="task_priority", values_callable=enum_values),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=enum_values),
        nullable=False,
        default=TaskStatus.PENDING,
        index=True,
    )
    is_completed = Column(Boolean, default=False, nullable=False)
    due_datetime = Column(DateTime(timezone=True), nullable=True)
    estimated_effort_mins = Column(Integer, nullable=True)
    position_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Recurrence metadata (stored, never expanded)
    recurring_pattern = Column(String(255), nullable=True)
    recurrence_end_date = Column(DateTime(timezone=True), nullable=True)
    recurrence_count = Column(Integer, nullable=True)

    created_by_user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Relationships
    task_list = relationship("TaskList")
    tags = relationship("Tag", secondary="task_tags", viewonly=True, order_by="Tag.id")
    assignees = relationship("User", secondary="task_assignments", viewonly=True, order_by="User.id")

    __table_args__ = (
        Index('idx_task_list_active_order', 'task_list_id', 'is_active', 'position_order'),
        Index('idx_task_parent', 'parent_task_id'),
        Index('idx_task_due', 'due_datetime'),
    )

    @property
    def workspace_id(self):
        return self.task_list.workspace_id

    def __repr__(self):
        return f"<Task title={self.title} status={self.status}>"


class TaskTag(Base):
    __tablename__ = "task_tags"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True)


class TaskAssignment(Base):
    __tablename__ = "task_assignments"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    __table_args__ = (
        Index('idx_task_assignment_user', 'user_id'),
    )
