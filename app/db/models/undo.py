# app/db/models/undo.py
from sqlalchemy import Column, Integer, JSON, ForeignKey, Index, Enum, DateTime, func

from app.db.models.base import Base, IDMixin, utc_now
from app.db.models.enums import UndoEntityType, UndoOperation, enum_values


class UndoLog(Base, IDMixin):
    """Single-use pre-image of a destructive change"""
    __tablename__ = "undo_logs"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    entity_type = Column(Enum(UndoEntityType, name="undo_entity_type", values_callable=enum_values), nullable=False)
    entity_id = Column(Integer, nullable=False)
    operation = Column(Enum(UndoOperation, name="undo_operation", values_callable=enum_values), nullable=False)
    data_snapshot = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now(), nullable=False)

    __table_args__ = (
        Index('idx_undo_user_created', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<UndoLog {self.operation} {self.entity_type}:{self.entity_id}>"
