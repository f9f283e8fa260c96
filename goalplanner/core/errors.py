"""Domain error taxonomy rendered as JSON error payloads at the HTTP boundary."""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import status


class GoalPlannerError(Exception):
    """Base class for failures that map onto an HTTP status and error code."""

    code = "ERROR"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_payload(self, request_id: str | None = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        if request_id:
            payload["request_id"] = request_id
        return payload


class ValidationFailure(GoalPlannerError):
    """Malformed or conflicting input (duplicate email, bad OTP)."""

    code = "VALIDATION_FAILED"
    status_code = status.HTTP_400_BAD_REQUEST


class AuthFailure(GoalPlannerError):
    code = "AUTH_FAILED"
    status_code = status.HTTP_401_UNAUTHORIZED


class NotFound(GoalPlannerError):
    """Goal, roadmap entry, or user absent or not owned by the caller."""

    code = "NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND


class GenerationFailure(GoalPlannerError):
    """Roadmap generation errored or produced unusable output."""

    code = "GENERATION_FAILED"
    status_code = status.HTTP_502_BAD_GATEWAY


class MailUnavailable(GoalPlannerError):
    code = "MAIL_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class StoreUnavailable(GoalPlannerError):
    code = "STORE_UNAVAILABLE"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
