# app/api/v1/schemas/task_lists.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.db.models import as_utc


class TaskListCreate(BaseModel):
    list_name: str = Field(..., max_length=255)
    workspace_id: Optional[int] = None
    user_id: Optional[int] = None
    position_order: int = 0


class TaskListUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    list_name: Optional[str] = Field(None, max_length=255)
    position_order: Optional[int] = None
    is_active: Optional[bool] = None


class TaskListResponse(BaseModel):
    task_list_id: int
    workspace_id: Optional[int] = None
    user_id: Optional[int] = None
    list_name: str
    position_order: int
    is_active: bool
    incomplete_task_count: int = 0
    created_at: datetime
    updated_at: datetime
    undo_id: Optional[int] = None

    @classmethod
    def from_model(cls, task_list, incomplete_task_count: int = 0, undo_id: Optional[int] = None):
        return cls(
            task_list_id=task_list.id,
            workspace_id=task_list.workspace_id,
            user_id=task_list.user_id,
            list_name=task_list.list_name,
            position_order=task_list.position_order,
            is_active=task_list.is_active,
            incomplete_task_count=incomplete_task_count,
            created_at=as_utc(task_list.created_at),
            updated_at=as_utc(task_list.updated_at),
            undo_id=undo_id,
        )


class TaskListDeletedResponse(BaseModel):
    task_list_id: int
    is_active: bool = False
    undo_id: int
