# app/exceptions/domain.py
"""Errors raised by the task-tracking core; each maps to one HTTP status."""
from fastapi import HTTPException, status


class TaskCraftError(HTTPException):
    """Base error carrying a user-visible message"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(TaskCraftError):
    """Malformed, missing or out-of-enum input"""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidOwner(ValidationError):
    """A list or tag with neither a workspace nor a user owner"""

    def __init__(self, detail: str = "Invalid task list owner"):
        super().__init__(detail)


class Forbidden(TaskCraftError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(TaskCraftError):
    """Entity missing, inactive, or hidden from the requester"""
    status_code = status.HTTP_404_NOT_FOUND


class Expired(TaskCraftError):
    """A time window (undo, comment edit) has elapsed"""
    status_code = status.HTTP_400_BAD_REQUEST

