# app/auth/dependencies.py
from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from jose import ExpiredSignatureError, JWTError
from loguru import logger

from app.db.database import get_db
from app.auth.security import decode_token
from app.db.crud.user import get_user_by_id
from app.db.models import User
from app.exceptions.auth import AuthenticationError, InactiveUserError, TokenExpiredError

# OAuth2PasswordBearer for token extraction
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def strip_bearer(raw: Optional[str]) -> Optional[str]:
    """Accept both 'Bearer <jwt>' and a bare '<jwt>'."""
    if not raw:
        return None
    raw = raw.strip()
    if raw.lower().startswith("bearer "):
        raw = raw[7:].strip()
    return raw or None


async def authenticate(db: AsyncSession, token: Optional[str]) -> User:
    """
    Resolve a bearer token to an active user or raise AuthenticationError.
    Shared by HTTP routes and the websocket handshake.
    """
    token = strip_bearer(token)
    if not token:
        raise AuthenticationError("Not authenticated")

    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError:
        raise AuthenticationError("Invalid token")

    user_id = payload.get("user_id")
    if payload.get("type") != "access" or not user_id:
        logger.warning("Invalid token payload - missing required fields")
        raise AuthenticationError("Invalid token")

    user = await get_user_by_id(db, user_id)
    if not user:
        logger.warning(f"User not found | user_id={user_id}")
        raise AuthenticationError("Invalid token")

    if not user.is_active:
        logger.warning(f"Inactive user authentication attempt | email={user.email}")
        raise InactiveUserError()

    return user


async def get_current_user(
        db: AsyncSession = Depends(get_db),
        token: Optional[str] = Depends(oauth2_scheme)
) -> User:
    user = await authenticate(db, token)
    logger.debug(f"User authenticated | user_id={user.id}")
    return user
