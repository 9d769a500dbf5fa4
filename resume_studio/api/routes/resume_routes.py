"""
Resume Routes

POST /resume/generate - Generate a tailored LaTeX resume for a job
POST /resume/score - Score a resume (ATS + recruiter) and store the result
GET /resume/history - Caller's resumes, newest first, with latest score
GET /resume/{resume_id} - One resume with its latest score
GET /resume/{resume_id}/download - The .tex source as a file
DELETE /resume/{resume_id} - Delete a resume and its scores
"""

import re
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from resume_studio.core.auth import get_current_user
from resume_studio.core.responses import success
from resume_studio.models import Resume
from resume_studio.services.ats_scorer_service import get_ats_scorer_service
from resume_studio.services.resume_generator_service import get_resume_generator_service
from resume_studio.schemas.schemas import (
    ApiResponse, GenerateResumeRequest, MessageResponse, ResumeResponse, ResumeScoreResponse, ScoreResumeRequest
)

router = APIRouter(prefix="/resume", tags=["Resumes"])


def to_response(resume: Resume) -> ResumeResponse:
    data = ResumeResponse.model_validate(resume)
    if resume.scores:
        data.latest_score = ResumeScoreResponse.model_validate(resume.scores[0])
    return data


def download_filename(title: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", title) + ".tex"


@router.post("/generate", response_model=ApiResponse[ResumeResponse], status_code=201)
def generate_resume(body: GenerateResumeRequest, request: Request, user: dict = Depends(get_current_user)):
    """
    Generate a resume for an analyzed job.

    The strategy decides which sections appear and in what order.
    """
    resume = get_resume_generator_service().generate_resume(
        user["profile_id"], body.job_description_id, body.strategy.value
    )
    return success(to_response(resume), request)


@router.post("/score", response_model=ApiResponse[ResumeScoreResponse], status_code=201)
def score_resume(body: ScoreResumeRequest, request: Request, user: dict = Depends(get_current_user)):
    score = get_ats_scorer_service().score_resume(body.resume_id, user["profile_id"])
    return success(ResumeScoreResponse.model_validate(score), request)


@router.get("/history", response_model=ApiResponse[List[ResumeResponse]])
def resume_history(request: Request, user: dict = Depends(get_current_user)):
    resumes = get_resume_generator_service().get_resume_history(user["profile_id"])
    return success([to_response(r) for r in resumes], request)


@router.get("/{resume_id}", response_model=ApiResponse[ResumeResponse])
def get_resume(resume_id: str, request: Request, user: dict = Depends(get_current_user)):
    resume = get_resume_generator_service().get_resume(resume_id, user["profile_id"])
    return success(to_response(resume), request)


@router.get("/{resume_id}/download")
def download_resume(resume_id: str, user: dict = Depends(get_current_user)):
    """Download the LaTeX source (compile with pdflatex + moderncv)."""
    resume = get_resume_generator_service().get_resume(resume_id, user["profile_id"])
    return Response(
        content=resume.latex_content,
        media_type="application/x-latex",
        headers={"Content-Disposition": f'attachment; filename="{download_filename(resume.title)}"'},
    )


@router.delete("/{resume_id}", response_model=ApiResponse[MessageResponse])
def delete_resume(resume_id: str, request: Request, user: dict = Depends(get_current_user)):
    get_resume_generator_service().delete_resume(resume_id, user["profile_id"])
    return success(MessageResponse(message="Resume deleted successfully"), request)
