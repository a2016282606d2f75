# app/db/models/auth.py
"""User identity model"""
from sqlalchemy import Column, String, Boolean, Index
from sqlalchemy.orm import relationship

from app.db.models.base import Base, TimestampMixin, IDMixin


class User(Base, IDMixin, TimestampMixin):
    """User account; owns personal task lists and personal tags"""
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    workspaces = relationship("UserWorkspace", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_user_email_active', 'email', 'is_active'),
    )

    def __repr__(self):
        return f"<User email={self.email}>"
