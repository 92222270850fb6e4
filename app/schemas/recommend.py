"""
Slot and Center Schemas

Typed records for rows returned by the hosted backend and for scored
slots produced by slot_recommender. Rows are validated here before they
reach the scoring function.
"""

import re
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


class Center(BaseModel):
    """Physical service center."""
    id: str = Field(..., description="Center identifier")
    center_name: str = Field(..., description="Display name")
    address: str = Field("", description="Street address")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")

    model_config = ConfigDict(extra="ignore")


class Slot(BaseModel):
    """
    Bookable appointment unit at a center on a date/time.

    booked_count never exceeds capacity in the backend; rows violating it
    are rejected at this boundary.
    """
    id: str = Field(..., description="Slot identifier")
    center_id: str = Field(..., description="Owning center")
    date: str = Field(..., description="Calendar day (YYYY-MM-DD)")
    time: str = Field(..., description="Start time (HH:MM, 24h)")
    capacity: int = Field(..., description="Total capacity", ge=1)
    booked_count: int = Field(0, description="Confirmed bookings", ge=0)

    model_config = ConfigDict(extra="ignore")

    @field_validator("time")
    @classmethod
    def _check_time(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("time must be HH:MM")
        return value[:5]

    @model_validator(mode="after")
    def _check_booked(self) -> "Slot":
        if self.booked_count > self.capacity:
            raise ValueError("booked_count exceeds capacity")
        return self

    @property
    def remaining(self) -> int:
        return self.capacity - self.booked_count


class ScoredSlot(Slot):
    """Slot annotated by the recommender. Derived on every fetch."""
    score: float = Field(..., description="Recommendation score (about 12-100)")
    is_recommended: bool = Field(False, description="True only for the best slot")
    reason: str = Field(..., description="Why this slot is attractive")
    estimated_wait_time: int = Field(..., description="Expected wait in minutes", ge=0)
    display_time: Optional[str] = Field(None, description="12-hour display time")


class SlotListData(BaseModel):
    center_id: str
    date: str
    display_date: str
    slots: List[ScoredSlot]
    recommended: Optional[ScoredSlot] = None
    total_count: int = Field(..., ge=0)


class DateOption(BaseModel):
    date: str
    display_date: str
