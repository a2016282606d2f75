# app/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from slowapi.util import get_remote_address

from app.db.database import get_db
from app.auth.dependencies import get_current_user
from app.auth.security import Hasher, create_access_token
from app.db.crud.user import get_user_by_email, create_user_db
from app.api.v1.schemas.auth import AuthResponse, UserCreate, UserLogin, UserProfile, UserSetting
from app.db.models import User
from app.exceptions.auth import InactiveUserError, InvalidCredentialsError, UserAlreadyExistsError
from app.middleware.rate_limiting import limiter
from app.core.config import settings
from app.core import tracing

router = APIRouter()


def build_auth_response(user: User) -> AuthResponse:
    token = create_access_token(data={"sub": user.email, "user_id": user.id})
    return AuthResponse(
        token=token,
        user_profile=UserProfile.from_model(user),
        user_setting=UserSetting(),
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def signup(request: Request, user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    ip = get_remote_address(request)
    tracing.info("Signup attempt", email=user_in.email, ip=ip)

    if await get_user_by_email(db, user_in.email):
        tracing.warning("Signup failed - email in use", email=user_in.email, ip=ip)
        raise UserAlreadyExistsError()

    try:
        user = await create_user_db(db, {
            "email": user_in.email,
            "hashed_password": Hasher.get_password_hash(user_in.password),
            "full_name": user_in.full_name,
        })
    except Exception as e:
        tracing.error("Failed to create user", email=user_in.email, ip=ip, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not create user")

    tracing.info("User signed up", user_id=user.id, ip=ip)
    return build_auth_response(user)


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.AUTH_RATE_LIMIT)
async def login(request: Request, credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    ip = get_remote_address(request)
    tracing.info("Login attempt", email=credentials.email, ip=ip)

    user = await get_user_by_email(db, credentials.email)
    if not user or not Hasher.verify_password(credentials.password, user.hashed_password):
        tracing.warning("Login failed - invalid credentials", email=credentials.email, ip=ip)
        raise InvalidCredentialsError()

    if not user.is_active:
        tracing.warning("Login failed - account inactive", email=credentials.email, ip=ip)
        raise InactiveUserError()

    tracing.info("Login successful", user_id=user.id, ip=ip)
    return build_auth_response(user)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its copy."""
    tracing.info("User logged out", user_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
