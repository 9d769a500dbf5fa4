"""
Authentication Routes

POST /auth/register - Create account + empty profile, sets session cookie
POST /auth/login - Verify credentials, sets session cookie
POST /auth/logout - Clear session cookie
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends, Request, Response

from resume_studio.core.auth import clear_auth_cookie, get_current_user, set_auth_cookie
from resume_studio.core.responses import success
from resume_studio.services.auth_service import get_auth_service
from resume_studio.schemas.schemas import (
    ApiResponse, AuthResponse, LoginRequest, MessageResponse, RegisterRequest, UserResponse
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=201)
def register(body: RegisterRequest, request: Request, response: Response):
    """
    Register a new user account.

    The response sets an HTTP-only session cookie; the token is also
    returned for clients that prefer the Authorization header.
    """
    user, token = get_auth_service().register(body.email, body.password, body.name)
    set_auth_cookie(response, token)
    return success(AuthResponse(user=UserResponse.model_validate(user), access_token=token), request)


@router.post("/login", response_model=ApiResponse[AuthResponse])
def login(body: LoginRequest, request: Request, response: Response):
    """Login and receive the session cookie."""
    user, token = get_auth_service().login(body.email, body.password)
    set_auth_cookie(response, token)
    return success(AuthResponse(user=UserResponse.model_validate(user), access_token=token), request)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
def logout(request: Request, response: Response):
    clear_auth_cookie(response)
    return success(MessageResponse(message="Logged out successfully"), request)


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(request: Request, user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    return success(UserResponse.model_validate(get_auth_service().get_user(user["user_id"])), request)
