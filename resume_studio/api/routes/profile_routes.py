"""
Profile Routes

GET /profile - Full profile with all sections
POST /profile/save - Replace the sections present in the body
GET /profile/completeness - Completeness percent and missing sections
"""

from fastapi import APIRouter, Depends, Request

from resume_studio.core.auth import get_current_user
from resume_studio.core.responses import success
from resume_studio.services.profile_service import get_profile_service
from resume_studio.schemas.schemas import ApiResponse, CompletenessResponse, ProfileInput, ProfileResponse

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ApiResponse[ProfileResponse])
def get_profile(request: Request, user: dict = Depends(get_current_user)):
    profile = get_profile_service().get_profile(user["profile_id"])
    return success(ProfileResponse.model_validate(profile), request)


@router.post("/save", response_model=ApiResponse[ProfileResponse])
def save_profile(body: ProfileInput, request: Request, user: dict = Depends(get_current_user)):
    """
    Save profile sections.

    Each section included in the body replaces what is stored;
    sections left out are not touched.
    """
    profile = get_profile_service().save_profile(user["profile_id"], body)
    return success(ProfileResponse.model_validate(profile), request)


@router.get("/completeness", response_model=ApiResponse[CompletenessResponse])
def get_completeness(request: Request, user: dict = Depends(get_current_user)):
    result = get_profile_service().calculate_completeness(user["profile_id"])
    return success(CompletenessResponse(**result), request)
