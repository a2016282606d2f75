# app/api/v1/schemas/activity.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.db.models import as_utc


class ActivityResponse(BaseModel):
    activity_id: int
    user_id: int
    workspace_id: Optional[int] = None
    task_id: Optional[int] = None
    activity_type: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime

    @classmethod
    def from_model(cls, entry):
        return cls(
            activity_id=entry.id,
            user_id=entry.user_id,
            workspace_id=entry.workspace_id,
            task_id=entry.task_id,
            activity_type=entry.activity_type,
            details=entry.details,
            created_at=as_utc(entry.created_at),
        )


class ActivityPageResponse(BaseModel):
    activities: List[ActivityResponse] = Field(default_factory=list)
    total_count: int
    page: int
    page_size: int
