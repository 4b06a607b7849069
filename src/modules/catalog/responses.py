"""HTTP translation for stock failures shared by cart and checkout views."""

from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from modules.catalog.exceptions import (
    InsufficientStock,
    StockError,
    VariantInactive,
    VariantNotFound,
)
from modules.core.responses import error_response


def _code(exc: StockError) -> str:
    if isinstance(exc, InsufficientStock):
        return "insufficient_stock"
    if isinstance(exc, VariantInactive):
        return "variant_inactive"
    if isinstance(exc, VariantNotFound):
        return "variant_not_found"
    return "stock_error"


def stock_conflict_response(exc: StockError) -> Response:
    """409 carrying the failing variant and what is still available."""
    return error_response(
        "stock_conflict",
        str(exc),
        status.HTTP_409_CONFLICT,
        code=_code(exc),
        attr="variant_id",
        failing_variant_id=exc.variant_id,
        available_quantity=exc.available_quantity,
    )
