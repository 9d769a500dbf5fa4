"""
Auth Service - account registration and credential checks.

Registration creates the user and an empty profile in one transaction.
Emails are stored lower-cased so lookups are case-insensitive.
"""

from typing import Optional, Tuple

from loguru import logger

from resume_studio.core.auth import create_access_token, hash_password, verify_password
from resume_studio.core.errors import ApiError, AuthError
from resume_studio.db.database import get_db_session
from resume_studio.models import Profile, User


class AuthService:

    def register(self, email: str, password: str, name: str) -> Tuple[User, str]:
        email = email.strip().lower()

        with get_db_session() as db:
            if db.query(User).filter(User.email == email).first():
                raise ApiError(
                    "EMAIL_EXISTS",
                    "This email is already registered. Please login instead.",
                    400,
                )

            user = User(email=email, password_hash=hash_password(password), name=name.strip())
            user.profile = Profile(completeness_percent=0)
            db.add(user)
            db.flush()

        logger.info(f"Registered user {user.id}")
        return user, self._token_for(user)

    def login(self, email: str, password: str) -> Tuple[User, str]:
        email = email.strip().lower()

        with get_db_session() as db:
            user = db.query(User).filter(User.email == email).first()

        # Same error for unknown email and wrong password
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login for {email}")
            raise AuthError("INVALID_CREDENTIALS", "Invalid email or password")

        return user, self._token_for(user)

    def get_user(self, user_id: str) -> User:
        with get_db_session() as db:
            user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise AuthError("INVALID_TOKEN", "Invalid or expired session. Please log in again.")
        return user

    @staticmethod
    def _token_for(user: User) -> str:
        return create_access_token(data={"sub": user.id, "email": user.email})


# Singleton instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
