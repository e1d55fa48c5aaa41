"""Pydantic models for availability data and guest date selection."""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DayRate(BaseModel):
    """Single day entry from the Smoobu rates feed."""

    price: Optional[Decimal] = None
    min_length_of_stay: Optional[int] = None
    available: int = 0  # 0 or 1

    model_config = ConfigDict(extra="allow")


class AvailabilityDay(BaseModel):
    """Availability, price and minimum stay of one calendar day."""

    date: date
    price: Optional[Decimal] = None
    available: bool = False
    min_stay: Optional[int] = Field(None, alias="minStay")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class DateSelection(BaseModel):
    """Guest check-in / check-out selection.

    A complete selection always has ``check_out`` after ``check_in``; the
    availability of the nights in between is guaranteed by the selector that
    produced it.
    """

    check_in: Optional[date] = Field(None, alias="checkIn")
    check_out: Optional[date] = Field(None, alias="checkOut")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def _check_order(self) -> "DateSelection":
        if self.check_out is not None:
            if self.check_in is None:
                raise ValueError("check_out requires check_in")
            if self.check_out <= self.check_in:
                raise ValueError("check_out must be after check_in")
        return self

    @classmethod
    def empty(cls) -> "DateSelection":
        return cls()

    @property
    def is_empty(self) -> bool:
        return self.check_in is None and self.check_out is None

    @property
    def is_complete(self) -> bool:
        return self.check_in is not None and self.check_out is not None

    @property
    def nights(self) -> int:
        """Number of nights, or 0 while the selection is incomplete."""
        if not self.is_complete:
            return 0
        return (self.check_out - self.check_in).days
