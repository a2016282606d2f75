# app/api/v1/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional

from app.db.models import as_utc


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User's email address.")
    password: str = Field(..., min_length=8, max_length=64)
    full_name: Optional[str] = Field(None, max_length=255)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserProfile(BaseModel):
    user_id: int
    email: str
    full_name: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_model(cls, user):
        return cls(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            created_at=as_utc(user.created_at).isoformat() if user.created_at else None,
        )


class UserSetting(BaseModel):
    """Preference defaults; editing preferences is not exposed by this API"""
    dark_mode_enabled: bool = False
    timezone_offset: int = 0
    notif_in_app_task_assigned: bool = True
    notif_in_app_comment_mention: bool = True
    notif_in_app_reminder: bool = True
    notif_email_task_assigned: bool = True
    notif_email_comment_mention: bool = True
    notif_email_reminder: bool = True


class AuthResponse(BaseModel):
    token: str
    user_profile: UserProfile
    user_setting: UserSetting
