"""Helpers for building error responses from views.

Produces the same envelope as ``modules.core.exceptions.api_exception_handler``
so domain errors translated by views look like DRF's own errors.
"""

from __future__ import annotations

from typing import Any, Optional

from rest_framework.response import Response


def error_response(
    error_type: str,
    detail: str,
    status_code: int,
    code: Optional[str] = None,
    attr: Optional[str] = None,
    **extra: Any,
) -> Response:
    body = {
        "type": error_type,
        "errors": [{"code": code or error_type, "detail": detail, "attr": attr}],
    }
    body.update(extra)
    return Response(body, status=status_code)


def not_found(detail: str = "Not found.") -> Response:
    return error_response("not_found", detail, 404)


def validation_error(detail: str, attr: Optional[str] = None) -> Response:
    return error_response("validation_error", detail, 400, code="invalid", attr=attr)
