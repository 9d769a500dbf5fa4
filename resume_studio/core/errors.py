"""
API error types.

Services raise these; the handlers registered in main.py turn them into
the standard {success, data, error, meta} envelope.
"""

from typing import Any, Optional


class ApiError(Exception):
    """Base error carrying an HTTP status and a machine-readable code."""

    def __init__(self, code: str, message: str, status_code: int = 500, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details


class NotFoundError(ApiError):
    def __init__(self, resource: str = "Resource"):
        super().__init__("NOT_FOUND", f"{resource} not found", 404)


class ValidationError(ApiError):
    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__("VALIDATION_ERROR", message, 400, details)


class AuthError(ApiError):
    def __init__(self, code: str = "NOT_AUTHENTICATED", message: str = "Authentication required"):
        super().__init__(code, message, 401)


class AIServiceError(Exception):
    """AI provider call failed; callers fall back to rule-based output."""


class AINotConfiguredError(AIServiceError):
    """No API key configured for the AI provider."""
