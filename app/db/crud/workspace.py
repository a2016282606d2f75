from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.crud.access import can_access_workspace
from app.db.crud.user import get_user_by_id
from app.db.models import UserWorkspace, Workspace, WorkspaceRole
from app.exceptions.domain import Forbidden, NotFound, ValidationError


async def load_workspace_memberships(db: AsyncSession, user_id: int) -> List[Tuple[UserWorkspace, Workspace]]:
    """Active memberships of the user with their workspaces."""
    result = await db.execute(
        select(UserWorkspace, Workspace)
        .join(Workspace, Workspace.id == UserWorkspace.workspace_id)
        .where(UserWorkspace.user_id == user_id, UserWorkspace.is_active.is_(True))
        .order_by(Workspace.id)
    )
    return [(membership, workspace) for membership, workspace in result.all()]


async def create_workspace(db: AsyncSession, owner_id: int, workspace_name: str, is_personal: bool = False) -> Workspace:
    """Create a workspace and make the creator its owner."""
    try:
        name = (workspace_name or "").strip()
        if not name:
            raise ValidationError("workspace_name is required")

        workspace = Workspace(workspace_name=name, is_personal=is_personal)
        db.add(workspace)
        await db.flush()
        db.add(UserWorkspace(user_id=owner_id, workspace_id=workspace.id, role=WorkspaceRole.OWNER))
        await db.commit()
        await db.refresh(workspace)
        logger.info(f"Workspace created: {workspace.id} '{name}' by user {owner_id}")
        return workspace
    except Exception as e:
        logger.error(f"Failed to create workspace: {e}")
        await db.rollback()
        raise


async def add_member(db: AsyncSession, requester_id: int, workspace_id: int, user_id: int,
                     role: WorkspaceRole = WorkspaceRole.MEMBER) -> UserWorkspace:
    """Insert or re-activate a membership. Any active member may invite."""
    try:
        if not await can_access_workspace(db, requester_id, workspace_id):
            raise Forbidden("Forbidden: no access to workspace")
        user = await get_user_by_id(db, user_id)
        if user is None or not user.is_active:
            raise NotFound("User not found")

        membership = await db.get(UserWorkspace, (user_id, workspace_id))
        if membership is None:
            membership = UserWorkspace(user_id=user_id, workspace_id=workspace_id, role=role)
            db.add(membership)
        else:
            membership.role = role
            membership.is_active = True

        await db.commit()
        await db.refresh(membership)
        logger.info(f"User {user_id} added to workspace {workspace_id} as {role.value}")
        return membership
    except Exception as e:
        logger.error(f"Failed to add member {user_id} to workspace {workspace_id}: {e}")
        await db.rollback()
        raise


async def remove_member(db: AsyncSession, requester_id: int, workspace_id: int, user_id: int) -> None:
    try:
        if not await can_access_workspace(db, requester_id, workspace_id):
            raise Forbidden("Forbidden: no access to workspace")
        membership = await db.get(UserWorkspace, (user_id, workspace_id))
        if membership is None or not membership.is_active:
            raise NotFound("Membership not found")
        membership.is_active = False
        await db.commit()
        logger.info(f"User {user_id} removed from workspace {workspace_id}")
    except Exception as e:
        logger.error(f"Failed to remove member {user_id} from workspace {workspace_id}: {e}")
        await db.rollback()
        raise
