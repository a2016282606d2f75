# app/api/v1/schemas/comments.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.db.models import as_utc


class CommentCreate(BaseModel):
    content: str
    parent_comment_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str


class CommentResponse(BaseModel):
    comment_id: int
    task_id: int
    user_id: int
    parent_comment_id: Optional[int] = None
    content: str
    is_deleted: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, comment):
        return cls(
            comment_id=comment.id,
            task_id=comment.task_id,
            user_id=comment.user_id,
            parent_comment_id=comment.parent_comment_id,
            content=comment.content,
            is_deleted=comment.is_deleted,
            created_at=as_utc(comment.created_at),
            updated_at=as_utc(comment.updated_at),
        )


class CommentDeletedResponse(BaseModel):
    comment_id: int
    is_deleted: bool = True
    undo_id: int = Field(..., description="Pass to POST /undo within the undo window")
