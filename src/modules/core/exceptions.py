"""Uniform error envelope for every API response.

DRF errors are rendered as::

    {"type": "validation_error",
     "errors": [{"code": "required", "detail": "...", "attr": "items"}]}

Domain errors raised by the service layer are translated by the views; this
handler only shapes what DRF itself raises (auth, validation, throttling,
parse errors) so clients see a single format.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from rest_framework import exceptions
from rest_framework.views import exception_handler

logger = structlog.get_logger(__name__)


def _error_type(exc: Exception) -> str:
    if isinstance(exc, exceptions.ValidationError):
        return "validation_error"
    if isinstance(exc, exceptions.ParseError):
        return "validation_error"
    if isinstance(exc, (exceptions.NotAuthenticated, exceptions.AuthenticationFailed)):
        return "authentication_error"
    if isinstance(exc, exceptions.PermissionDenied):
        return "permission_error"
    if isinstance(exc, exceptions.Throttled):
        return "throttled"
    return "client_error"


def _flatten(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    """Flatten DRF's nested ``ErrorDetail`` structures into a list."""
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            child = key if attr is None else f"{attr}.{key}"
            if key == "non_field_errors":
                child = attr
            errors.extend(_flatten(value, child))
        return errors
    if isinstance(detail, list):
        errors = []
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                errors.extend(_flatten(value, f"{attr}.{index}" if attr else str(index)))
            else:
                errors.extend(_flatten(value, attr))
        return errors
    return [
        {
            "code": getattr(detail, "code", "error"),
            "detail": str(detail),
            "attr": attr,
        }
    ]


def api_exception_handler(exc: Exception, context: Dict[str, Any]):
    response = exception_handler(exc, context)
    if response is None:
        return None

    response.data = {
        "type": _error_type(exc),
        "errors": _flatten(exc.detail if hasattr(exc, "detail") else response.data),
    }
    logger.info(
        "api.error_response",
        error_type=response.data["type"],
        status_code=response.status_code,
    )
    return response
