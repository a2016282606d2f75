# app/db/models/tag.py
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index, CheckConstraint

from app.db.models.base import Base, TimestampMixin, IDMixin


class Tag(Base, IDMixin, TimestampMixin):
    """Label scoped to one workspace or one user; names are unique per scope among active tags"""
    __tablename__ = "tags"

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    tag_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "(workspace_id IS NOT NULL AND user_id IS NULL) OR (workspace_id IS NULL AND user_id IS NOT NULL)",
            name="ck_tag_single_scope",
        ),
        Index('idx_tag_workspace_name', 'workspace_id', 'tag_name'),
        Index('idx_tag_user_name', 'user_id', 'tag_name'),
    )

    def __repr__(self):
        return f"<Tag name={self.tag_name} workspace_id={self.workspace_id} user_id={self.user_id}>"
