"""Helpers shared by the serverless request handlers."""

import json
from typing import Any, Optional

from src.models.employee import Caller
from src.utils.errors import (
    ConcurrencyConflictError,
    NotFoundError,
    PartialFailureError,
    SupabaseError,
    TaskCoinError,
    TaskValidationError,
)


class UnauthenticatedError(TaskCoinError):
    """Request carries no caller identity."""
    pass


def json_response(status_code: int, body: Any) -> dict:
    """Build a serverless JSON response."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, default=str),
    }


def error_response(error: Exception) -> dict:
    """Map an exception onto a status code and a single message."""
    if isinstance(error, TaskValidationError):
        return json_response(400, {"error": str(error), "fields": error.errors})
    if isinstance(error, UnauthenticatedError):
        return json_response(401, {"error": str(error)})
    if isinstance(error, NotFoundError):
        return json_response(404, {"error": str(error)})
    if isinstance(error, ConcurrencyConflictError):
        return json_response(409, {"error": str(error)})
    if isinstance(error, PartialFailureError):
        return json_response(502, {"error": str(error), "result": error.result})
    if isinstance(error, SupabaseError):
        return json_response(502, {"error": str(error)})
    return json_response(500, {"error": "internal server error"})


def get_header(request: dict, name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    headers = request.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def parse_body(request: dict) -> dict:
    """Parse the JSON body; invalid JSON is a validation error."""
    raw = request.get("body") or ""
    if isinstance(raw, dict):
        return raw
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        raise TaskValidationError({"body": "Request body must be valid JSON"})
    if not isinstance(body, dict):
        raise TaskValidationError({"body": "Request body must be a JSON object"})
    return body


def caller_from_request(request: dict) -> Caller:
    """Build the caller identity from X-User-Id / X-User-Name headers."""
    user_id = (get_header(request, "X-User-Id") or "").strip()
    if not user_id:
        raise UnauthenticatedError("Missing X-User-Id header")
    user_name = (get_header(request, "X-User-Name") or "").strip() or "Unknown User"
    return Caller(user_id=user_id, user_name=user_name)
