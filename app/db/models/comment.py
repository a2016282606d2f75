# app/db/models/comment.py
from sqlalchemy import Column, Integer, Text, Boolean, ForeignKey, Index

from app.db.models.base import Base, TimestampMixin, IDMixin


class TaskComment(Base, IDMixin, TimestampMixin):
    """Comment on a task, threaded through parent_comment_id"""
    __tablename__ = "task_comments"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id = Column(Integer, ForeignKey("task_comments.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index('idx_comment_task_created', 'task_id', 'created_at'),
    )

    def __repr__(self):
        return f"<TaskComment task_id={self.task_id} user_id={self.user_id}>"
