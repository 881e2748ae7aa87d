"""
Helpers shared by every blueprint.

Success bodies are always `{"data": ...}`, error bodies always
`{"error": "..."}`.
"""

from typing import Any

from flask import Response, current_app, g, jsonify, request
from pydantic import BaseModel

from budget_tracker.auth import Authenticated, AuthResult
from budget_tracker.orchestrator import AppComponents
from budget_tracker.validation import InputValidationError


EXTENSION_KEY = "budget_tracker"


def components() -> AppComponents:
    """The component bundle of the running app."""
    return current_app.extensions[EXTENSION_KEY]


def to_json(value: Any) -> Any:
    """Dump pydantic models (or lists of them) to JSON-ready data."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def ok(data: Any, status: int = 200) -> Response:
    response = jsonify({"data": to_json(data)})
    response.status_code = status
    return response


def error_response(message: str, status: int) -> Response:
    response = jsonify({"error": message})
    response.status_code = status
    return response


def read_json_body() -> Any:
    """
    Decode the request body.

    An empty body reads as an empty object.

    Raises:
        InputValidationError: If the body is present but not valid JSON
    """
    payload = request.get_json(force=True, silent=True)
    if payload is None and request.get_data(cache=True).strip():
        raise InputValidationError("Request body must be valid JSON")
    return payload


def authenticate() -> AuthResult:
    """Run the auth gate for the current request."""
    result = components().gate.require_authenticated_user(request)
    if isinstance(result, Authenticated):
        g.user_id = result.user.id
    return result
