"""
Resume Studio - Main Application

FastAPI backend with:
- SQL database (PostgreSQL) for users, profiles, jobs, resumes, applications
- MongoDB for the AI response cache (optional)
- OpenAI-compatible AI provider for analysis and rewriting
- Cookie-based JWT authentication

Run: uvicorn resume_studio.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pymongo.errors import PyMongoError
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from resume_studio import __version__
from resume_studio.api.routes import api_router
from resume_studio.core.auth import clear_auth_cookie
from resume_studio.core.config import get_settings
from resume_studio.core.errors import ApiError
from resume_studio.core.logging import setup_logging
from resume_studio.core.responses import error_response, success
from resume_studio.db.database import init_db, test_database_connection
from resume_studio.db.mongodb import init_mongo_indexes, mongo_enabled, test_mongo_connection
from resume_studio.middleware.rate_limiter import rate_limit_middleware
from resume_studio.middleware.request_id import request_id_middleware
from resume_studio.middleware.request_logger import request_logger_middleware
from resume_studio.middleware.security_headers import security_headers_middleware

settings = get_settings()

# Create FastAPI app
app = FastAPI(
    title="Resume Studio",
    description="""
    Resume builder with AI-assisted tailoring.

    ## Features
    - **Authentication**: cookie-based JWT sessions
    - **Profile**: personal info, skills, experience, projects, education, certifications, achievements
    - **Jobs**: job description analysis (AI with rule-based fallback) and profile matching
    - **Resumes**: strategy-based LaTeX generation, ATS and recruiter scoring
    - **Applications**: application tracking with status history
    - **Monitoring**: health and request metrics

    ## Response envelope
    Every endpoint returns `{success, data, error, meta}`.
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# HTTP middleware: the last one registered runs first
app.middleware("http")(rate_limit_middleware)
app.middleware("http")(request_logger_middleware)
app.middleware("http")(security_headers_middleware)
app.middleware("http")(request_id_middleware)

# CORS: only the configured frontend, with cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset"],
)


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message}")
    response = error_response(exc.status_code, exc.code, exc.message, exc.details, request)
    if exc.code == "INVALID_TOKEN":
        clear_auth_cookie(response)
    return response


def validation_details(errors) -> dict:
    """Map pydantic errors to {"field.path": [messages]}."""
    details = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        details.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return details


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "VALIDATION_ERROR", "Validation failed", validation_details(exc.errors()), request)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning(f"Integrity error: {exc.orig}")
    return error_response(409, "CONFLICT", "A record with this value already exists", request=request)


@app.exception_handler(NoResultFound)
async def no_result_handler(request: Request, exc: NoResultFound):
    return error_response(404, "NOT_FOUND", "Resource not found", request=request)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(
        exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail), request=request,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred", request=request)


# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Configure logging, create tables and the cache indexes."""
    setup_logging()
    init_db()
    if mongo_enabled():
        try:
            init_mongo_indexes()
        except PyMongoError as e:
            logger.warning(f"MongoDB cache index initialization failed: {e}")
    logger.info(f"Resume Studio {__version__} started ({settings.environment})")


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """Detailed health check."""
    database_ok = test_database_connection()
    if mongo_enabled():
        cache_store = "connected" if test_mongo_connection() else "disconnected"
    else:
        cache_store = "memory"
    return success({
        "status": "healthy" if database_ok else "unhealthy",
        "database": "connected" if database_ok else "disconnected",
        "cache": cache_store,
    }, request)
