"""
Job Routes

POST /job/analyze - Store and analyze a job description
POST /job/analyze/upload - Same, from a PDF / DOCX / TXT file
POST /job/match - Match the caller's profile against an analyzed job
GET /job - Job history (newest first, paginated)
GET /job/{job_id} - Job description with analysis
"""

from typing import List

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from resume_studio.core.auth import get_current_user
from resume_studio.core.errors import ValidationError
from resume_studio.core.responses import paginate, success
from resume_studio.services.job_analysis_service import get_job_analysis_service
from resume_studio.services.match_service import get_match_service
from resume_studio.utils.file_upload import extract_text_from_file
from resume_studio.utils.pagination import PageParams, page_params
from resume_studio.schemas.schemas import (
    ApiResponse, JobAnalyzeRequest, JobDescriptionResponse, JobMatchRequest, MatchResult
)

router = APIRouter(prefix="/job", tags=["Jobs"])

MIN_DESCRIPTION_CHARS = 100
MAX_DESCRIPTION_CHARS = 10000


@router.post("/analyze", response_model=ApiResponse[JobDescriptionResponse], status_code=201)
def analyze_job(body: JobAnalyzeRequest, request: Request, user: dict = Depends(get_current_user)):
    """
    Analyze a job description.

    Uses the AI provider when configured; otherwise (or on failure)
    a rule-based keyword analysis.
    """
    job = get_job_analysis_service().analyze_job(
        user["profile_id"], body.title, body.company, body.description_text
    )
    return success(JobDescriptionResponse.model_validate(job), request)


@router.post("/analyze/upload", response_model=ApiResponse[JobDescriptionResponse], status_code=201)
async def analyze_job_file(
    request: Request,
    title: str = Form(..., min_length=2, max_length=100),
    company: str = Form(..., min_length=2, max_length=100),
    file: UploadFile = File(...),
    user: dict = Depends(get_current_user),
):
    """Analyze a job description uploaded as a file (max 5MB)."""
    text, filename = await extract_text_from_file(file)
    text = text.strip()
    if len(text) < MIN_DESCRIPTION_CHARS:
        raise ValidationError(f"Extracted text from '{filename}' is too short (min {MIN_DESCRIPTION_CHARS} characters)")
    if len(text) > MAX_DESCRIPTION_CHARS:
        raise ValidationError(f"Extracted text from '{filename}' is too long (max {MAX_DESCRIPTION_CHARS} characters)")

    job = await run_in_threadpool(
        get_job_analysis_service().analyze_job, user["profile_id"], title, company, text
    )
    return success(JobDescriptionResponse.model_validate(job), request)


@router.post("/match", response_model=ApiResponse[MatchResult])
def match_job(body: JobMatchRequest, request: Request, user: dict = Depends(get_current_user)):
    """Compare the caller's profile with an analyzed job's ATS keywords."""
    result = get_match_service().match_profile_to_job(user["profile_id"], body.job_description_id)
    return success(MatchResult(**result), request)


@router.get("", response_model=ApiResponse[List[JobDescriptionResponse]])
def job_history(request: Request, pages: PageParams = Depends(page_params),
                user: dict = Depends(get_current_user)):
    jobs, total = get_job_analysis_service().get_job_history(user["profile_id"], pages.page, pages.limit)
    return success(
        [JobDescriptionResponse.model_validate(j) for j in jobs],
        request,
        pagination=paginate(pages.page, pages.limit, total),
    )


@router.get("/{job_id}", response_model=ApiResponse[JobDescriptionResponse])
def get_job(job_id: str, request: Request, user: dict = Depends(get_current_user)):
    job = get_job_analysis_service().get_job_description(job_id, user["profile_id"])
    return success(JobDescriptionResponse.model_validate(job), request)
