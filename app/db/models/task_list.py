# app/db/models/task_list.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, CheckConstraint

from app.db.models.base import Base, TimestampMixin, IDMixin


class TaskList(Base, IDMixin, TimestampMixin):
    """A list of tasks owned by exactly one workspace or one user"""
    __tablename__ = "task_lists"

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    list_name = Column(String(255), nullable=False)
    position_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(workspace_id IS NOT NULL AND user_id IS NULL) OR (workspace_id IS NULL AND user_id IS NOT NULL)",
            name="ck_task_list_single_owner",
        ),
        Index('idx_task_list_workspace', 'workspace_id', 'is_active'),
        Index('idx_task_list_user', 'user_id', 'is_active'),
    )

    def __repr__(self):
        return f"<TaskList name={self.list_name} workspace_id={self.workspace_id} user_id={self.user_id}>"
