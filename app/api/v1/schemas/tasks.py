# app/api/v1/schemas/tasks.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Union
from datetime import datetime

from app.db.models import TaskPriority, TaskStatus, as_utc

TagRef = Union[int, str]


class TaskCreate(BaseModel):
    """Schema for creating a task; tags mixes existing tag ids and new tag names"""
    task_list_id: int
    title: str = Field(..., max_length=500)
    parent_task_id: Optional[int] = None
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    is_completed: Optional[bool] = None
    due_datetime: Optional[datetime] = None
    estimated_effort_mins: Optional[int] = Field(None, ge=0)
    position_order: Optional[int] = None
    recurring_pattern: Optional[str] = Field(None, max_length=255)
    recurrence_end_date: Optional[datetime] = None
    recurrence_count: Optional[int] = Field(None, ge=0)
    tags: List[TagRef] = Field(default_factory=list)
    assigned_user_ids: List[int] = Field(default_factory=list)


class TaskUpdate(BaseModel):
    """
    Partial update. Unknown keys are rejected; is_active=false soft-deletes
    the task itself without touching its subtasks.
    """
    model_config = ConfigDict(extra="forbid")

    parent_task_id: Optional[int] = None
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    priority: Optional[TaskPriority] = None
    due_datetime: Optional[datetime] = None
    estimated_effort_mins: Optional[int] = Field(None, ge=0)
    status: Optional[TaskStatus] = None
    is_completed: Optional[bool] = None
    position_order: Optional[int] = None
    is_active: Optional[bool] = None
    recurring_pattern: Optional[str] = Field(None, max_length=255)
    recurrence_end_date: Optional[datetime] = None
    recurrence_count: Optional[int] = Field(None, ge=0)
    tags: Optional[List[TagRef]] = None
    assigned_user_ids: Optional[List[int]] = None


class TaskBulkUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    task_ids: List[int] = Field(..., min_length=1)
    status: Optional[TaskStatus] = None
    is_completed: Optional[bool] = None
    is_active: Optional[bool] = None
    add_tag_ids: List[int] = Field(default_factory=list)
    remove_tag_ids: List[int] = Field(default_factory=list)
    assign_user_ids: List[int] = Field(default_factory=list)
    unassign_user_ids: List[int] = Field(default_factory=list)


class TaskTagItem(BaseModel):
    tag_id: int
    tag_name: str


class AssignedUser(BaseModel):
    user_id: int
    full_name: Optional[str] = None
    email: str

    @classmethod
    def from_model(cls, user):
        return cls(user_id=user.id, full_name=user.full_name, email=user.email)


class TaskResponse(BaseModel):
    """Task with its active tags and assignees"""
    task_id: int
    task_list_id: int
    workspace_id: Optional[int] = None
    parent_task_id: Optional[int] = None
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    status: TaskStatus
    is_completed: bool
    due_datetime: Optional[datetime] = None
    estimated_effort_mins: Optional[int] = None
    position_order: int
    is_active: bool
    recurring_pattern: Optional[str] = None
    recurrence_end_date: Optional[datetime] = None
    recurrence_count: Optional[int] = None
    created_by_user_id: int
    created_at: datetime
    updated_at: datetime
    tags: List[TaskTagItem] = Field(default_factory=list)
    assigned_users: List[AssignedUser] = Field(default_factory=list)
    undo_id: Optional[int] = None

    @classmethod
    def from_model(cls, task, undo_id: Optional[int] = None):
        """Requires task_list, tags and assignees to be loaded"""
        return cls(
            task_id=task.id,
            task_list_id=task.task_list_id,
            workspace_id=task.task_list.workspace_id,
            parent_task_id=task.parent_task_id,
            title=task.title,
            description=task.description,
            priority=task.priority,
            status=task.status,
            is_completed=task.is_completed,
            due_datetime=as_utc(task.due_datetime),
            estimated_effort_mins=task.estimated_effort_mins,
            position_order=task.position_order,
            is_active=task.is_active,
            recurring_pattern=task.recurring_pattern,
            recurrence_end_date=as_utc(task.recurrence_end_date),
            recurrence_count=task.recurrence_count,
            created_by_user_id=task.created_by_user_id,
            created_at=as_utc(task.created_at),
            updated_at=as_utc(task.updated_at),
            tags=[TaskTagItem(tag_id=tag.id, tag_name=tag.tag_name) for tag in task.tags if tag.is_active],
            assigned_users=[AssignedUser.from_model(user) for user in task.assignees],
            undo_id=undo_id,
        )


class TaskPageResponse(BaseModel):
    """total_count ignores filters; filtered_count is the exact filtered size"""
    tasks: List[TaskResponse]
    total_count: int
    filtered_count: int
    page: int
    page_size: int


class TaskDeletedResponse(BaseModel):
    task_id: int
    is_active: bool = False
    deleted_task_ids: List[int]
    undo_id: int


class BulkUpdateResponse(BaseModel):
    updated_tasks: List[TaskResponse]


class AssignmentRequest(BaseModel):
    user_ids: List[int] = Field(..., min_length=1)


class TagAttachRequest(BaseModel):
    tag_ids: List[int] = Field(..., min_length=1)
