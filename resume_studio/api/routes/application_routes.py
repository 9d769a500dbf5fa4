"""
Application Tracking Routes

GET /applications - List (optional ?status=, paginated)
GET /applications/stats - Counts by status + recent activity
POST /applications - Create
PUT /applications/{app_id} - Update (status changes stamp their date)
DELETE /applications/{app_id} - Delete
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from resume_studio.core.auth import get_current_user
from resume_studio.core.responses import paginate, success
from resume_studio.services.application_service import get_application_service
from resume_studio.utils.pagination import PageParams, page_params
from resume_studio.schemas.schemas import (
    ApiResponse, ApplicationCreate, ApplicationResponse, ApplicationStats, ApplicationStatus,
    ApplicationUpdate, MessageResponse
)

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("", response_model=ApiResponse[List[ApplicationResponse]])
def list_applications(
    request: Request,
    status: Optional[ApplicationStatus] = Query(None),
    pages: PageParams = Depends(page_params),
    user: dict = Depends(get_current_user),
):
    items, total = get_application_service().list_applications(
        user["profile_id"], status.value if status else None, pages.page, pages.limit
    )
    return success(
        [ApplicationResponse.model_validate(a) for a in items],
        request,
        pagination=paginate(pages.page, pages.limit, total),
    )


@router.get("/stats", response_model=ApiResponse[ApplicationStats])
def application_stats(request: Request, user: dict = Depends(get_current_user)):
    stats = get_application_service().get_stats(user["profile_id"])
    stats["recent_activity"] = [
        {**item, "application": ApplicationResponse.model_validate(item["application"])}
        for item in stats["recent_activity"]
    ]
    return success(ApplicationStats(**stats), request)


@router.post("", response_model=ApiResponse[ApplicationResponse], status_code=201)
def create_application(body: ApplicationCreate, request: Request, user: dict = Depends(get_current_user)):
    app = get_application_service().create_application(user["profile_id"], body)
    return success(ApplicationResponse.model_validate(app), request)


@router.put("/{app_id}", response_model=ApiResponse[ApplicationResponse])
def update_application(app_id: str, body: ApplicationUpdate, request: Request,
                       user: dict = Depends(get_current_user)):
    app = get_application_service().update_application(app_id, user["profile_id"], body)
    return success(ApplicationResponse.model_validate(app), request)


@router.delete("/{app_id}", response_model=ApiResponse[MessageResponse])
def delete_application(app_id: str, request: Request, user: dict = Depends(get_current_user)):
    get_application_service().delete_application(app_id, user["profile_id"])
    return success(MessageResponse(message="Application deleted successfully"), request)
