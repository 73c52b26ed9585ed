"""
Response envelope shared by every endpoint.

Successful responses are ``{"success": true, ...payload}``; failures
are ``{"success": false, "error": "<message>"}``.
"""

from typing import Any, Dict

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


def envelope(**payload: Any) -> Dict[str, Any]:
    """Wrap ``payload`` in a success envelope."""
    return {"success": True, **payload}


def error_envelope(message: str) -> Dict[str, Any]:
    return ErrorResponse(error=message).model_dump()
