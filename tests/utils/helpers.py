"""Test helper functions."""

import json
from typing import Any, Dict, Optional


def create_request(
    method: str = "POST",
    path: str = "/api/tasks/update",
    body: Any = None,
    user_id: Optional[str] = "U123456",
    user_name: str = "Ana Souza",
    query: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """Create a serverless request object for testing."""
    request_headers = {"content-type": "application/json"}
    if user_id is not None:
        request_headers["x-user-id"] = user_id
        request_headers["x-user-name"] = user_name
    request_headers.update(headers or {})

    return {
        "method": method,
        "path": path,
        "headers": request_headers,
        "body": json.dumps(body) if isinstance(body, dict) else (body or ""),
        "query": query or {},
    }


def response_json(response: Dict[str, Any]) -> Dict[str, Any]:
    """Decode a handler response body."""
    return json.loads(response["body"])
