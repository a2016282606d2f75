from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional, Dict, Any
from loguru import logger

from app.db.models import User


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    """Case-insensitive lookup of a user by email."""
    result = await db.execute(select(User).filter(func.lower(User.email) == email.strip().lower()))
    return result.scalars().first()


async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id))
    user = result.scalars().first()
    if user:
        logger.debug(f"User found: ID {user_id}")
    return user


async def create_user_db(db: AsyncSession, user_data: Dict[str, Any]) -> User:
    """
    Creates a new user record. Email is stored lower-cased.
    """
    try:
        if not user_data.get('email') or not user_data.get('hashed_password'):
            raise ValueError("Email and hashed_password are required")

        user = User(**{**user_data, "email": user_data["email"].strip().lower()})
        db.add(user)
        await db.commit()
        await db.refresh(user)
        logger.info(f"User created successfully: {user.email}")
        return user
    except Exception as e:
        logger.error(f"Failed to create user: {e}")
        await db.rollback()
        raise
