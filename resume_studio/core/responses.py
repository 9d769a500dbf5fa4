"""
Response envelope helpers.

Every /api response has the shape:
    {"success": bool, "data": ..., "error": {...} | null, "meta": {...}}
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from resume_studio.schemas.schemas import ErrorBody, Meta, Pagination


def build_meta(request: Optional[Request] = None, pagination: Optional[Pagination] = None) -> Meta:
    request_id = getattr(request.state, "request_id", None) if request is not None else None
    return Meta(
        timestamp=datetime.now(timezone.utc).isoformat(),
        request_id=request_id,
        pagination=pagination,
    )


def success(data: Any = None, request: Optional[Request] = None, pagination: Optional[Pagination] = None) -> dict:
    """Wrap data in a success envelope (returned from routes, validated by response_model)."""
    return {
        "success": True,
        "data": data,
        "error": None,
        "meta": build_meta(request, pagination),
    }


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    request: Optional[Request] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Build an error envelope as a JSONResponse."""
    error = ErrorBody(code=code, message=message, details=details)
    body = {
        "success": False,
        "data": None,
        "error": error.model_dump(exclude_none=True),
        "meta": build_meta(request).model_dump(exclude_none=True),
    }
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


def paginate(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
