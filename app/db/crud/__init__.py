"""CRUD operations for database models"""
from .user import (
    get_user_by_email,
    get_user_by_id,
    create_user_db,
)
from .workspace import (
    load_workspace_memberships,
    create_workspace,
    add_member,
    remove_member,
)
from . import access
from . import activity
from . import assignment
from . import comment
from . import notification
from . import query
from . import reminder
from . import tag
from . import task
from . import task_list
from . import undo

__all__ = [
    # User CRUD
    "get_user_by_email",
    "get_user_by_id",
    "create_user_db",
    # Workspace CRUD
    "load_workspace_memberships",
    "create_workspace",
    "add_member",
    "remove_member",
]
