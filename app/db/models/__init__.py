# app/db/models/__init__.py
"""
Database models package
Imports all models for easy access
"""

from app.db.models.base import Base, TimestampMixin, IDMixin, utc_now, as_utc

from app.db.models.enums import (
    TaskPriority, TaskStatus, WorkspaceRole, ReminderType, UndoEntityType, UndoOperation,
    SortField, SortOrder
)

from app.db.models.auth import User
from app.db.models.workspace import Workspace, UserWorkspace
from app.db.models.task_list import TaskList
from app.db.models.task import Task, TaskTag, TaskAssignment
from app.db.models.tag import Tag
from app.db.models.comment import TaskComment
from app.db.models.reminder import TaskReminder
from app.db.models.notification import Notification
from app.db.models.activity import ActivityLog
from app.db.models.undo import UndoLog

__all__ = [
    # Base classes
    'Base', 'TimestampMixin', 'IDMixin', 'utc_now', 'as_utc',

    # Enums
    'TaskPriority', 'TaskStatus', 'WorkspaceRole', 'ReminderType', 'UndoEntityType', 'UndoOperation',
    'SortField', 'SortOrder',

    # Identity and tenancy
    'User', 'Workspace', 'UserWorkspace',

    # Task tracking
    'TaskList', 'Task', 'TaskTag', 'TaskAssignment', 'Tag', 'TaskComment', 'TaskReminder',

    # Inbox
    'Notification',

    # Audit and undo
    'ActivityLog', 'UndoLog',
]
