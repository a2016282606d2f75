# app/api/v1/router.py
from fastapi import APIRouter

from app.api.v1.endpoints import (
    activity_logs, auth, comments, notifications, realtime, reminders, search, tags, task_lists, tasks, undo,
    workspaces,
)

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(workspaces.router, prefix="/workspaces", tags=["workspaces"])
api_router.include_router(task_lists.router, prefix="/task_lists", tags=["task-lists"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(comments.router, prefix="/tasks", tags=["comments"])
api_router.include_router(reminders.router, prefix="/tasks", tags=["reminders"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(activity_logs.router, prefix="/activity_logs", tags=["activity"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(undo.router, prefix="/undo", tags=["undo"])
api_router.include_router(realtime.router, tags=["realtime"])
