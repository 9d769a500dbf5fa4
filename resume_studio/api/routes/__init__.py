"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from resume_studio.api.routes.auth_routes import router as auth_router
from resume_studio.api.routes.profile_routes import router as profile_router
from resume_studio.api.routes.job_routes import router as job_router
from resume_studio.api.routes.resume_routes import router as resume_router
from resume_studio.api.routes.application_routes import router as application_router
from resume_studio.api.routes.monitoring_routes import router as monitoring_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(resume_router)
api_router.include_router(application_router)
api_router.include_router(monitoring_router)
