# app/api/v1/endpoints/workspaces.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User, WorkspaceRole
from app.api.v1.schemas.workspaces import MemberAdd, MemberResponse, MembershipResponse, WorkspaceCreate
from app.auth.dependencies import get_current_user

router = APIRouter()


@router.get("", response_model=List[MembershipResponse])
async def list_my_workspaces(
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    memberships = await crud.load_workspace_memberships(db, current_user.id)
    return [MembershipResponse.from_models(membership, workspace) for membership, workspace in memberships]


@router.post("", response_model=MembershipResponse, status_code=status.HTTP_201_CREATED)
async def create_workspace(
        workspace_in: WorkspaceCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    workspace = await crud.create_workspace(db, current_user.id, workspace_in.workspace_name, workspace_in.is_personal)
    return MembershipResponse(
        workspace_id=workspace.id,
        workspace_name=workspace.workspace_name,
        is_personal=workspace.is_personal,
        role=WorkspaceRole.OWNER,
    )


@router.post("/{workspace_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
        workspace_id: int,
        member_in: MemberAdd,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    """Members only take effect on a client's realtime topics after it reconnects"""
    membership = await crud.add_member(db, current_user.id, workspace_id, member_in.user_id, member_in.role)
    return MemberResponse(
        workspace_id=membership.workspace_id,
        user_id=membership.user_id,
        role=membership.role,
        is_active=membership.is_active,
    )


@router.delete("/{workspace_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
        workspace_id: int,
        user_id: int,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    await crud.remove_member(db, current_user.id, workspace_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
