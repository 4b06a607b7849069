"""Catalog DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


class AvailabilityQueryDTO(BaseModel):
    """Partial size/color selection for the availability endpoint."""

    model_config = ConfigDict(frozen=True)

    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("size", "color")
    @classmethod
    def blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class StockAdjustmentDTO(BaseModel):
    """Admin stock adjustment: an absolute ``stock`` or a relative ``delta``."""

    model_config = ConfigDict(frozen=True)

    stock: Optional[int] = None
    delta: Optional[int] = None
    reason: str = ""

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Stock cannot be negative.")
        return v

    @model_validator(mode="after")
    def exactly_one_of_stock_or_delta(self):
        if (self.stock is None) == (self.delta is None):
            raise ValueError("Provide exactly one of 'stock' or 'delta'.")
        return self
