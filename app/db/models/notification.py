# app/db/models/notification.py
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index

from app.db.models.base import Base, TimestampMixin, IDMixin


class Notification(Base, IDMixin, TimestampMixin):
    """Inbox entry for one user"""
    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    related_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True, index=True)
    notification_type = Column(String(20), nullable=False)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index('idx_notification_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<Notification user_id={self.user_id} type={self.notification_type}>"
