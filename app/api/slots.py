"""
Slots API Endpoints

Center listing, bookable dates and recommended slots.

Endpoints:
- GET /centers - List service centers
- GET /slots/dates - Dates open for booking (today + window)
- GET /slots - Scored slots of a center on a date, best one flagged
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List

from fastapi import APIRouter, Query
from pydantic import ValidationError as PydanticValidationError

from app.algorithms.slot_recommender import recommend_slots, format_date, format_time
from app.api.common import standard_response, short_trace
from app.core.config import settings
from app.core.errors import NotFoundError, ValidationError
from app.schemas.base import ApiResponse
from app.schemas.recommend import Center, DateOption, ScoredSlot, Slot, SlotListData
from app.tools import backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

ALGORITHM_ID = "availability_off_peak_weighted"


# ============================================================================
# Utilities
# ============================================================================

def validate_slot_rows(rows: List[Dict[str, Any]]) -> List[Slot]:
    """
    Validate backend slot rows into typed records.

    Rows that fail validation are skipped and logged; they never reach the
    scoring function.
    """
    slots = []
    for row in rows:
        try:
            slots.append(Slot.model_validate(row))
        except PydanticValidationError as e:
            logger.warning(
                f"[{short_trace()}] Skipping malformed slot row {row.get('id')}: "
                f"{e.error_count()} validation error(s)"
            )
    return slots


def booking_dates(today: date, days: int) -> List[DateOption]:
    """Consecutive calendar days starting today."""
    return [
        DateOption(
            date=(today + timedelta(days=i)).isoformat(),
            display_date=format_date(today + timedelta(days=i)),
        )
        for i in range(days)
    ]


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            message="Date must be in YYYY-MM-DD format",
            details={"field": "date", "value": value}
        )


# ============================================================================
# Endpoints
# ============================================================================

@router.get("/centers", response_model=ApiResponse)
async def list_centers():
    """List service centers."""
    centers = [Center.model_validate(c).model_dump() for c in await backend_client.get_centers()]
    return standard_response(
        message=f"Found {len(centers)} centers",
        data={"centers": centers, "total_count": len(centers)},
        source="backend"
    )


@router.get("/slots/dates")
async def list_dates():
    """Dates open for booking."""
    dates = booking_dates(date.today(), settings.BOOKING_WINDOW_DAYS)
    return standard_response(
        message=f"{len(dates)} dates available",
        data={"dates": [d.model_dump() for d in dates]}
    )


@router.get("/slots", response_model=ApiResponse)
async def list_slots(
    center_id: str = Query(..., description="Center identifier"),
    date: str = Query(..., description="Date in YYYY-MM-DD format")
):
    """
    Scored slots of a center on a date.

    Fully booked slots are left out; the remaining ones are sorted by
    score and the first is marked as recommended.
    """
    day = _parse_day(date)

    center = await backend_client.get_center(center_id)
    if not center:
        raise NotFoundError(message="Center not found", details={"center_id": center_id})

    rows = await backend_client.get_slots(center_id=center_id, date=day.isoformat())
    slots = validate_slot_rows(rows)

    scored = [
        ScoredSlot(**s, display_time=format_time(s["time"]))
        for s in recommend_slots([slot.model_dump() for slot in slots])
    ]
    recommended = scored[0] if scored else None

    data = SlotListData(
        center_id=center_id,
        date=day.isoformat(),
        display_date=format_date(day),
        slots=scored,
        recommended=recommended,
        total_count=len(scored),
    )

    if recommended:
        message = (
            f"Found {len(scored)} open slots at {center['center_name']} on {format_date(day)}. "
            f"Recommended: {recommended.display_time} ({recommended.reason})"
        )
    else:
        message = f"No open slots at {center['center_name']} on {format_date(day)}"

    return standard_response(
        message=message,
        data=data.model_dump(),
        algorithm=ALGORITHM_ID,
        source="backend"
    )
