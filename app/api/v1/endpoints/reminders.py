# app/api/v1/endpoints/reminders.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.reminders import ReminderCreate, ReminderResponse
from app.auth.dependencies import get_current_user

router = APIRouter()


@router.post("/{task_id}/reminders", response_model=ReminderResponse, status_code=status.HTTP_201_CREATED)
async def create_reminder(
        task_id: int,
        reminder_in: ReminderCreate,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
):
    reminder = await crud.reminder.create_reminder(
        db, current_user.id, task_id, reminder_in.reminder_datetime, reminder_in.reminder_type
    )
    return ReminderResponse.from_model(reminder)
