# app/db/models/activity.py
from sqlalchemy import Column, Integer, String, JSON, ForeignKey, Index

from app.db.models.base import Base, TimestampMixin, IDMixin


class ActivityLog(Base, IDMixin, TimestampMixin):
    """Append-only audit row"""
    __tablename__ = "activity_logs"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True)
    activity_type = Column(String(50), nullable=False)
    details = Column(JSON, nullable=True)

    __table_args__ = (
        Index('idx_activity_workspace_created', 'workspace_id', 'created_at'),
        Index('idx_activity_task_created', 'task_id', 'created_at'),
    )

    def __repr__(self):
        return f"<ActivityLog type={self.activity_type} task_id={self.task_id}>"
