# app/api/v1/schemas/tags.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from app.db.models import as_utc


class TagCreate(BaseModel):
    """Exactly one of workspace_id / user_id"""
    tag_name: str = Field(..., max_length=100)
    workspace_id: Optional[int] = None
    user_id: Optional[int] = None


class TagUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tag_name: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None


class TagResponse(BaseModel):
    tag_id: int
    tag_name: str
    workspace_id: Optional[int] = None
    user_id: Optional[int] = None
    is_active: bool
    created_at: datetime

    @classmethod
    def from_model(cls, tag):
        return cls(
            tag_id=tag.id,
            tag_name=tag.tag_name,
            workspace_id=tag.workspace_id,
            user_id=tag.user_id,
            is_active=tag.is_active,
            created_at=as_utc(tag.created_at),
        )


class TagDeletedResponse(BaseModel):
    tag_id: int
    is_active: bool = False
    undo_id: int
