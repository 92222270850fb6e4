"""
Booking and Face Verification Schemas
"""

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

UPDATE_TYPES = ("biometric", "address", "name", "dob", "mobile", "email")
BOOKING_STATUSES = ("Booked", "Confirmed", "Completed", "Cancelled")
TRACKING_STEPS = ["Booked", "Confirmed", "Completed"]


class FaceVerificationRequest(BaseModel):
    """
    Live captures from the browser scanner.

    Multi-frame mode sends up to three embeddings; single-frame mode sends one.
    Length is checked by the matcher so one bad frame does not fail the request.
    """
    model_config = ConfigDict(allow_inf_nan=False)

    live_embeddings: List[List[float]] = Field(..., description="Live face embeddings", min_length=1, max_length=10)


class MatchDecisionModel(BaseModel):
    matched: bool
    avg_distance: float
    confidence: int
    threshold: float
    frames_used: int
    message: str


class BookingCreateRequest(FaceVerificationRequest):
    slot_id: str = Field(..., description="Slot to book", min_length=1)
    update_type: str = Field(..., description=f"One of {', '.join(UPDATE_TYPES)}", pattern="^(" + "|".join(UPDATE_TYPES) + ")$")


class Booking(BaseModel):
    id: str
    user_id: str
    slot_id: str
    status: str = Field(..., description=f"One of {', '.join(BOOKING_STATUSES)}")
    booking_type: str = "Normal"
    update_type: Optional[str] = None
    created_at: Optional[str] = None
    slot_date: Optional[str] = None
    slot_time: Optional[str] = None
    center_name: Optional[str] = None
    center_address: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class BookingTracking(Booking):
    """Booking with its progress through Booked -> Confirmed -> Completed."""
    steps: List[str] = Field(default_factory=lambda: list(TRACKING_STEPS))
    step_index: int = Field(..., description="Index of current step; -1 when cancelled")
    is_cancelled: bool = False
    can_cancel: bool = False
