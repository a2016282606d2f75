# app/api/v1/schemas/undo.py
from pydantic import BaseModel
from typing import Any, Dict

from app.db.models import UndoEntityType


class UndoRequest(BaseModel):
    undo_id: int


class UndoResponse(BaseModel):
    success: bool = True
    entity_type: UndoEntityType
    entity_id: int
    restored_entity: Dict[str, Any]
