# app/api/v1/schemas/workspaces.py
from pydantic import BaseModel, Field

from app.db.models import WorkspaceRole


class WorkspaceCreate(BaseModel):
    workspace_name: str = Field(..., max_length=255)
    is_personal: bool = False


class MemberAdd(BaseModel):
    user_id: int
    role: WorkspaceRole = WorkspaceRole.MEMBER


class MembershipResponse(BaseModel):
    workspace_id: int
    workspace_name: str
    is_personal: bool
    role: WorkspaceRole

    @classmethod
    def from_models(cls, membership, workspace):
        return cls(
            workspace_id=workspace.id,
            workspace_name=workspace.workspace_name,
            is_personal=workspace.is_personal,
            role=membership.role,
        )


class MemberResponse(BaseModel):
    workspace_id: int
    user_id: int
    role: WorkspaceRole
    is_active: bool
