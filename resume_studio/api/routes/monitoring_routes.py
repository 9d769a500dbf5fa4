"""
Monitoring Routes

GET /monitoring/health - Public health summary (memory, uptime, AI usage)
GET /monitoring/metrics - Request metrics, AI usage, rate limiter state (requires login)
GET /health - Liveness
"""

import resource
import sys
import time

from fastapi import APIRouter, Depends, Request

from resume_studio.core.auth import get_current_user
from resume_studio.core.responses import success
from resume_studio.middleware.rate_limiter import rate_limiter
from resume_studio.middleware.request_logger import request_metrics
from resume_studio.services.ai_client import get_ai_client

router = APIRouter(tags=["Monitoring"])

STARTED_AT = time.monotonic()
MEMORY_LIMIT_MB = 500


def uptime_seconds() -> int:
    return int(time.monotonic() - STARTED_AT)


def memory_usage() -> dict:
    """Peak resident set size of this process, in MB."""
    rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # Linux reports KB, macOS reports bytes
    rss_mb = rss / (1024 * 1024) if sys.platform == "darwin" else rss / 1024
    return {"rss_mb": round(rss_mb, 1)}


@router.get("/monitoring/health")
def monitoring_health(request: Request):
    memory = memory_usage()
    ai_client = get_ai_client()
    return success({
        "status": "healthy" if memory["rss_mb"] < MEMORY_LIMIT_MB else "degraded",
        "uptime": uptime_seconds(),
        "memory": memory,
        "ai": {"enabled": ai_client.enabled, **ai_client.get_stats()},
    }, request)


@router.get("/monitoring/metrics")
def monitoring_metrics(request: Request, user: dict = Depends(get_current_user)):
    ai_stats = get_ai_client().get_stats()
    return success({
        "requests": request_metrics.snapshot(),
        "ai": ai_stats,
        "cache": {"size": ai_stats["cache_size"]},
        "rate_limiter": {"tracked_windows": rate_limiter.tracked_windows()},
        "memory": memory_usage(),
        "uptime": uptime_seconds(),
    }, request)


@router.get("/health")
def api_health(request: Request):
    return success({"status": "ok", "uptime": uptime_seconds()}, request)
