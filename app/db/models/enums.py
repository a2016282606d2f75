# app/db/models/enums.py
import enum


class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskStatus(str, enum.Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class WorkspaceRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class ReminderType(str, enum.Enum):
    IN_APP = "in-app"
    PUSH = "push"
    EMAIL = "email"


class UndoEntityType(str, enum.Enum):
    """Entity types an undo entry can restore"""
    TASK = "task"
    TASK_LIST = "task_list"
    TAG = "tag"
    COMMENT = "comment"


class UndoOperation(str, enum.Enum):
    DELETE = "delete"


class SortField(str, enum.Enum):
    """Sort keys accepted by task queries"""
    CUSTOM = "custom"
    DEADLINE = "deadline"
    PRIORITY = "priority"
    CREATED_AT = "created_at"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


def enum_values(enum_cls):
    """Persist enum values ("In Progress") rather than member names."""
    return [member.value for member in enum_cls]
