"""
Bookings API Endpoints

Face-verified booking confirmation, booking tracking and cancellation.

Endpoints:
- POST /bookings/verify-face - Check live captures against the stored face (booking threshold)
- POST /bookings - Verify face and book a slot
- GET /bookings - Own bookings with tracking progress
- POST /bookings/{booking_id}/cancel - Cancel an own booking

**Requires authentication**
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from app.algorithms.age_milestone import check_age_milestone
from app.algorithms.face_matcher import MatchDecision, VerificationFlow, verify_face
from app.api.common import standard_response, short_trace
from app.api.slots import validate_slot_rows
from app.core.config import settings
from app.core.errors import (
    ConflictError,
    FaceMismatchError,
    NotFoundError,
    UnauthorizedError,
)
from app.core.security import Session, get_session
from app.schemas.bookings import (
    TRACKING_STEPS,
    BookingCreateRequest,
    BookingTracking,
    FaceVerificationRequest,
    MatchDecisionModel,
)
from app.tools import backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

CANCELLABLE_STATUSES = ("Booked", "Confirmed")


# ============================================================================
# Helpers
# ============================================================================

def track_booking(booking: Dict[str, Any]) -> Dict[str, Any]:
    """Attach Booked -> Confirmed -> Completed progress to a booking."""
    status_value = booking.get("status")
    is_cancelled = status_value == "Cancelled"
    if is_cancelled:
        step_index = -1
    elif status_value in TRACKING_STEPS:
        step_index = TRACKING_STEPS.index(status_value)
    else:
        step_index = 0

    return BookingTracking(
        **booking,
        step_index=step_index,
        is_cancelled=is_cancelled,
        can_cancel=status_value in CANCELLABLE_STATUSES,
    ).model_dump()


def _require_match(decision: MatchDecision) -> None:
    if not decision.matched:
        raise FaceMismatchError(
            message=decision.message,
            details={
                "confidence": decision.confidence,
                "avg_distance": round(decision.avg_distance, 4),
                "threshold": decision.threshold,
            }
        )


async def _load_user(session: Session) -> Dict[str, Any]:
    user = await backend_client.get_user(session.user_id)
    if not user:
        raise UnauthorizedError(
            message="Account not found. Please log in again.",
            details={"reason": "unknown_user"}
        )
    return user


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/verify-face")
async def verify_booking_face(
    body: FaceVerificationRequest,
    session: Session = Depends(get_session)
):
    """
    Face check under the booking threshold without booking anything.

    A mismatch is returned as a normal result (matched=false) so the
    scanner can prompt for another capture.
    """
    user = await _load_user(session)
    decision = verify_face(user.get("face_descriptor"), body.live_embeddings, VerificationFlow.BOOKING)

    return standard_response(
        message=decision.message,
        data=MatchDecisionModel(**decision.to_dict()).model_dump(),
        user_id=session.user_id,
        algorithm="euclidean_avg_distance"
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_booking(
    body: BookingCreateRequest,
    session: Session = Depends(get_session)
):
    """
    Verify the caller's face, then book the slot.

    Booking type is "Age Milestone" when the citizen is within the
    reminder window of their 15th or 50th birthday.
    """
    user = await _load_user(session)

    decision = verify_face(user.get("face_descriptor"), body.live_embeddings, VerificationFlow.BOOKING)
    _require_match(decision)

    row = await backend_client.get_slot(body.slot_id)
    slots = validate_slot_rows([row]) if row else []
    if not slots:
        raise NotFoundError(message="Slot not found", details={"slot_id": body.slot_id})
    slot = slots[0]

    if slot.remaining <= 0:
        raise ConflictError(message="This slot is fully booked.", details={"slot_id": slot.id})

    existing = await backend_client.find_active_booking(session.user_id, slot.id)
    if existing:
        raise ConflictError(message="You have already booked this slot.", details={"booking_id": existing.get("id")})

    milestone = check_age_milestone(user.get("date_of_birth"), window_days=settings.MILESTONE_WINDOW_DAYS)
    booking_type = "Age Milestone" if milestone else "Normal"

    # Claim the seat first so a full slot can never get an extra booking row
    await backend_client.increment_slot_booked_count(slot.model_dump())

    booking = await backend_client.insert_booking({
        "user_id": session.user_id,
        "slot_id": slot.id,
        "status": "Booked",
        "booking_type": booking_type,
        "update_type": body.update_type,
    })

    logger.info(
        f"[{short_trace()}] Booking {booking.get('id')} created for user {session.user_id} "
        f"slot {slot.id} ({booking_type})"
    )

    return standard_response(
        message="Booking confirmed successfully!",
        data={
            "booking": track_booking(booking),
            "verification": MatchDecisionModel(**decision.to_dict()).model_dump(),
        },
        user_id=session.user_id
    )


@router.get("")
async def list_bookings(session: Session = Depends(get_session)):
    """Own bookings split into active and cancelled."""
    bookings = [track_booking(b) for b in await backend_client.list_bookings(session.user_id)]
    active = [b for b in bookings if not b["is_cancelled"]]
    cancelled = [b for b in bookings if b["is_cancelled"]]

    return standard_response(
        message=f"{len(active)} active bookings, {len(cancelled)} cancelled",
        data={"active": active, "cancelled": cancelled, "total_count": len(bookings)},
        user_id=session.user_id,
        source="backend"
    )


@router.post("/{booking_id}/cancel")
async def cancel_booking(booking_id: str, session: Session = Depends(get_session)):
    """
    Cancel an own booking.

    Completed and already cancelled bookings cannot be cancelled. Other
    users' bookings are reported as not found.
    """
    booking = await backend_client.get_booking(booking_id)
    if not booking or booking.get("user_id") != session.user_id:
        raise NotFoundError(message="Booking not found", details={"booking_id": booking_id})

    if booking.get("status") not in CANCELLABLE_STATUSES:
        raise ConflictError(
            message=f"A {booking.get('status')} booking cannot be cancelled.",
            details={"booking_id": booking_id, "status": booking.get("status")}
        )

    await backend_client.update_booking_status(booking_id, "Cancelled")
    # The PATCH response has no embedded slot/center, so keep the loaded details
    updated = {**booking, "status": "Cancelled"}

    logger.info(f"[{short_trace()}] Booking {booking_id} cancelled by user {session.user_id}")

    return standard_response(
        message="Booking cancelled",
        data={"booking": track_booking(updated)},
        user_id=session.user_id
    )
