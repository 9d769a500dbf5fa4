"""
Authentication Utility - JWT and Password handling.

Provides:
- Password hashing with bcrypt
- JWT token creation/verification
- Session cookie helpers (HTTP-only "token" cookie)
- FastAPI dependency for protected routes

The token is read from the cookie first, then from "Authorization: Bearer".
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from resume_studio.core.config import get_settings
from resume_studio.core.errors import ApiError, AuthError
from resume_studio.db.database import get_db_session
from resume_studio.models import Profile, User

settings = get_settings()

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (optional: the cookie is the primary carrier)
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.cookie_name,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.jwt_expire_minutes * 60,
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.cookie_name,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    """
    FastAPI dependency - Get current authenticated user and their profile id.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user["profile_id"]
    """
    token = request.cookies.get(settings.cookie_name)
    if not token and credentials:
        token = credentials.credentials
    if not token:
        raise AuthError("NOT_AUTHENTICATED", "Authentication required. Please log in.")

    payload = decode_token(token)
    user_id = payload.get("sub") if payload else None
    if not user_id:
        raise AuthError("INVALID_TOKEN", "Invalid or expired session. Please log in again.")

    with get_db_session() as db:
        user = db.query(User).filter(User.id == user_id).first()
        profile = db.query(Profile).filter(Profile.user_id == user_id).first() if user else None

    if not user:
        raise AuthError("INVALID_TOKEN", "Invalid or expired session. Please log in again.")

    if not profile:
        raise ApiError("PROFILE_NOT_FOUND", "User profile not found", 500)

    return {"user_id": user.id, "email": user.email, "name": user.name, "profile_id": profile.id}
