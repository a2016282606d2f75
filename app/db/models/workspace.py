# app/db/models/workspace.py
"""Workspace and membership models"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, Enum
from sqlalchemy.orm import relationship

from app.db.models.base import Base, TimestampMixin, IDMixin
from app.db.models.enums import WorkspaceRole, enum_values


class Workspace(Base, IDMixin, TimestampMixin):
    """Named container shared by its members"""
    __tablename__ = "workspaces"

    workspace_name = Column(String(255), nullable=False)
    is_personal = Column(Boolean, default=False, nullable=False)

    members = relationship("UserWorkspace", back_populates="workspace", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Workspace name={self.workspace_name} personal={self.is_personal}>"


class UserWorkspace(Base, TimestampMixin):
    """Membership of a user in a workspace; only active rows grant access"""
    __tablename__ = "user_workspaces"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), primary_key=True)
    role = Column(
        Enum(WorkspaceRole, name="workspace_role", values_callable=enum_values),
        nullable=False,
        default=WorkspaceRole.MEMBER,
    )
    is_active = Column(Boolean, default=True, nullable=False)

    user = relationship("User", back_populates="workspaces")
    workspace = relationship("Workspace", back_populates="members")

    __table_args__ = (
        Index('idx_user_workspace_active', 'user_id', 'is_active'),
    )

    def __repr__(self):
        return f"<UserWorkspace user_id={self.user_id} workspace_id={self.workspace_id} role={self.role}>"
