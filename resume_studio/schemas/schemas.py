"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Responses are wrapped in ApiResponse[...] (see core/responses.py).
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List, Any, Dict, Generic, TypeVar, Union
import datetime as dt
from datetime import date, datetime
from enum import Enum

T = TypeVar("T")


# ============================================================
# ENUMS
# ============================================================

class ResumeStrategy(str, Enum):
    max_ats = "max_ats"
    recruiter_readability = "recruiter_readability"
    career_switch = "career_switch"
    promotion_internal = "promotion_internal"
    stretch_role = "stretch_role"


class ApplicationStatus(str, Enum):
    applied = "applied"
    interview = "interview"
    offer = "offer"
    rejected = "rejected"
    withdrawn = "withdrawn"


class KeywordCategory(str, Enum):
    required = "required"
    preferred = "preferred"
    general = "general"


class MatchType(str, Enum):
    direct = "direct"
    partial = "partial"
    gap = "gap"


# ============================================================
# ENVELOPE
# ============================================================

class ErrorBody(BaseModel):
    code: str
    message: str
    details: Optional[Any] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Meta(BaseModel):
    timestamp: str
    request_id: Optional[str] = None
    pagination: Optional[Pagination] = None


class ApiResponse(BaseModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[ErrorBody] = None
    meta: Meta


class MessageResponse(BaseModel):
    message: str


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=100)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime


class AuthResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class PersonalInfoInput(BaseModel):
    first_name: str = Field("", max_length=100)
    last_name: str = Field("", max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)
    linkedin: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=255)


class SkillGroupInput(BaseModel):
    category_name: str = Field(..., min_length=1, max_length=100)
    skills: List[str] = []


class ExperienceInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    location: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    is_current: bool = False
    description: str = Field(..., min_length=1)
    order: Optional[int] = None


class ProjectInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    url: Optional[str] = None
    technologies: Optional[str] = None
    order: Optional[int] = None


class EducationInput(BaseModel):
    institution: str = Field(..., min_length=1, max_length=200)
    degree: str = Field(..., min_length=1, max_length=200)
    field: Optional[str] = None
    start_date: date
    end_date: Optional[date] = None
    gpa: Optional[str] = Field(None, max_length=20)
    order: Optional[int] = None


class CertificationInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    issuer: str = Field(..., min_length=1, max_length=200)
    issue_date: date
    expiry_date: Optional[date] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = None


class AchievementInput(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    date: Optional[dt.date] = None


class ProfileInput(BaseModel):
    """Every section present replaces the stored section; absent sections are left alone."""
    personal_info: Optional[PersonalInfoInput] = None
    summary: Optional[str] = None
    skills: Optional[List[SkillGroupInput]] = None
    experiences: Optional[List[ExperienceInput]] = None
    projects: Optional[List[ProjectInput]] = None
    educations: Optional[List[EducationInput]] = None
    certifications: Optional[List[CertificationInput]] = None
    achievements: Optional[List[AchievementInput]] = None


class PersonalInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None


class SkillCategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class SkillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    category: SkillCategoryResponse


class ExperienceResponse(ExperienceInput):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str


class ProjectResponse(ProjectInput):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str


class EducationResponse(EducationInput):
    model_config = ConfigDict(from_attributes=True)

    id: str


class CertificationResponse(CertificationInput):
    model_config = ConfigDict(from_attributes=True)

    id: str


class AchievementResponse(AchievementInput):
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    summary: Optional[str] = None
    completeness_percent: int = 0
    personal_info: Optional[PersonalInfoResponse] = None
    skills: List[SkillResponse] = []
    experiences: List[ExperienceResponse] = []
    projects: List[ProjectResponse] = []
    educations: List[EducationResponse] = []
    certifications: List[CertificationResponse] = []
    achievements: List[AchievementResponse] = []
    updated_at: datetime


class CompletenessResponse(BaseModel):
    percent: int
    missing: List[str]


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobAnalyzeRequest(BaseModel):
    title: str = Field(..., min_length=2, max_length=100)
    company: str = Field(..., min_length=2, max_length=100)
    description_text: str = Field(..., min_length=100, max_length=10000)


class JobMatchRequest(BaseModel):
    job_description_id: str = Field(..., min_length=1)


class ATSKeyword(BaseModel):
    keyword: str
    weight: Union[int, float] = 5
    category: KeywordCategory = KeywordCategory.general


class JobAnalysisResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    required_skills: List[str] = []
    preferred_skills: List[str] = []
    responsibilities: List[str] = []
    ats_keywords: List[ATSKeyword] = []
    experience_level: Optional[str] = None
    created_at: datetime


class JobDescriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    company: str
    description_text: str
    created_at: datetime
    analysis: Optional[JobAnalysisResponse] = None


class MatchItem(BaseModel):
    keyword: str
    match_type: MatchType
    evidence: Optional[str] = None
    suggestion: Optional[str] = None


class MatchResult(BaseModel):
    match_percent: int
    direct_matches: List[MatchItem] = []
    partial_matches: List[MatchItem] = []
    gaps: List[MatchItem] = []
    recommendations: List[str] = []


# ============================================================
# RESUME SCHEMAS
# ============================================================

class GenerateResumeRequest(BaseModel):
    job_description_id: str = Field(..., min_length=1)
    strategy: ResumeStrategy = ResumeStrategy.recruiter_readability


class ScoreResumeRequest(BaseModel):
    resume_id: str = Field(..., min_length=1)


class ResumeScoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    resume_id: str
    ats_score: int
    recruiter_score: int
    keyword_match_pct: int
    formatting_score: int
    readability_score: int
    metrics_score: int
    verbs_score: int
    breakdown: Dict[str, Dict[str, Union[int, float]]]
    missing_keywords: List[str] = []
    recommendations: List[str] = []
    scanned_at: datetime


class JobDescriptionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    company: str


class ResumeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    strategy: str
    latex_content: str
    version: int
    job_description_id: Optional[str] = None
    job_description: Optional[JobDescriptionSummary] = None
    latest_score: Optional[ResumeScoreResponse] = None
    created_at: datetime
    updated_at: datetime


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    job_title: str = Field(..., min_length=2, max_length=100)
    company: str = Field(..., min_length=2, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    job_description_id: Optional[str] = None
    resume_id: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.applied
    applied_date: Optional[date] = None
    salary: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)
    application_url: Optional[str] = Field(None, max_length=500)


class ApplicationUpdate(BaseModel):
    job_title: Optional[str] = Field(None, min_length=2, max_length=100)
    company: Optional[str] = Field(None, min_length=2, max_length=100)
    location: Optional[str] = Field(None, max_length=100)
    job_description_id: Optional[str] = None
    resume_id: Optional[str] = None
    status: Optional[ApplicationStatus] = None
    applied_date: Optional[date] = None
    salary: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)
    application_url: Optional[str] = Field(None, max_length=500)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    job_title: str
    company: str
    location: Optional[str] = None
    job_description_id: Optional[str] = None
    resume_id: Optional[str] = None
    status: ApplicationStatus
    applied_date: date
    interview_date: Optional[date] = None
    offer_date: Optional[date] = None
    rejection_date: Optional[date] = None
    salary: Optional[str] = None
    notes: Optional[str] = None
    application_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ActivityItem(BaseModel):
    date: datetime
    action: str
    application: ApplicationResponse


class ApplicationStats(BaseModel):
    total: int
    by_status: Dict[str, int]
    recent_activity: List[ActivityItem] = []
