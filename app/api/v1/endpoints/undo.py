# app/api/v1/endpoints/undo.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.db import crud
from app.db.models import User
from app.api.v1.schemas.undo import UndoRequest, UndoResponse
from app.auth.dependencies import get_current_user
from app.core.realtime import RealtimeBroadcaster, get_broadcaster
from app.core import tracing

router = APIRouter()


@router.post("", response_model=UndoResponse)
async def undo(
        undo_in: UndoRequest,
        db: AsyncSession = Depends(get_db),
        current_user: User = Depends(get_current_user),
        broadcaster: RealtimeBroadcaster = Depends(get_broadcaster),
):
    """Replay a destructive action recorded in the last few seconds"""
    result = await crud.undo.restore_undo(db, undo_in.undo_id, current_user.id)
    tracing.info("Undo performed", undo_id=undo_in.undo_id, entity_type=result.entity_type.value,
                 entity_id=result.entity_id, user_id=current_user.id)

    await broadcaster.undo_action_performed(
        {
            "entity_type": result.entity_type.value,
            "entity_id": result.entity_id,
            "data_snapshot": result.data_snapshot,
            "undone_by_user_id": current_user.id,
            "created_at": result.created_at.isoformat(),
        },
        current_user.id,
    )
    return UndoResponse(
        entity_type=result.entity_type,
        entity_id=result.entity_id,
        restored_entity=result.data_snapshot,
    )
