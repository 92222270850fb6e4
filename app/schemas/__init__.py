"""
Pydantic Schemas Package

Typed request/response models for the booking service endpoints and
boundary validation of backend rows.

Schema Conventions:
- Endpoint responses: {message: str, data: dict, proofs: Proofs}
- Errors: {detail: {code, message, details, trace_id}}
"""

from app.schemas.base import (
    Proofs,
    ApiResponse,
    ErrorDetail,
    ErrorResponse
)

from app.schemas.recommend import (
    Center,
    Slot,
    ScoredSlot,
    SlotListData,
    DateOption
)

from app.schemas.users import (
    RegisterRequest,
    LoginRequest,
    LanguageUpdateRequest,
    Milestone,
    UserProfile
)

from app.schemas.bookings import (
    FaceVerificationRequest,
    MatchDecisionModel,
    BookingCreateRequest,
    Booking,
    BookingTracking
)

from app.schemas.update_requests import (
    UpdateRequestCreate,
    UpdateRequest,
    UpdateRequestTracking
)

from app.schemas.chat import (
    ChatRequest,
    ChatResponse
)

__all__ = [
    # Base
    "Proofs",
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    # Slots
    "Center",
    "Slot",
    "ScoredSlot",
    "SlotListData",
    "DateOption",
    # Users
    "RegisterRequest",
    "LoginRequest",
    "LanguageUpdateRequest",
    "Milestone",
    "UserProfile",
    # Bookings
    "FaceVerificationRequest",
    "MatchDecisionModel",
    "BookingCreateRequest",
    "Booking",
    "BookingTracking",
    # Update requests
    "UpdateRequestCreate",
    "UpdateRequest",
    "UpdateRequestTracking",
    # Chat
    "ChatRequest",
    "ChatResponse",
]
