# app/api/v1/schemas/notifications.py
from pydantic import BaseModel, Field, StrictBool
from typing import List, Optional
from datetime import datetime

from app.db.models import as_utc


class NotificationReadUpdate(BaseModel):
    is_read: StrictBool


class NotificationResponse(BaseModel):
    notification_id: int
    user_id: int
    related_task_id: Optional[int] = None
    notification_type: str
    content: str
    is_read: bool
    created_at: datetime

    @classmethod
    def from_model(cls, notification):
        return cls(
            notification_id=notification.id,
            user_id=notification.user_id,
            related_task_id=notification.related_task_id,
            notification_type=notification.notification_type,
            content=notification.content,
            is_read=notification.is_read,
            created_at=as_utc(notification.created_at),
        )


class NotificationPageResponse(BaseModel):
    notifications: List[NotificationResponse] = Field(default_factory=list)
    total_count: int
    page: int
    page_size: int
