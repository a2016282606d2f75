# app/exceptions/auth.py
from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """Base authentication error"""
    def __init__(self, detail: str = "Authentication failed"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidCredentialsError(AuthenticationError):
    """Invalid email/password"""
    def __init__(self):
        super().__init__(detail="Invalid email or password")


class TokenExpiredError(AuthenticationError):
    def __init__(self):
        super().__init__(detail="Token has expired")


class InactiveUserError(AuthenticationError):
    """User account is inactive"""
    def __init__(self):
        super().__init__(detail="Account is inactive")


class UserAlreadyExistsError(HTTPException):
    def __init__(self):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already in use"
        )
