"""
Slot Recommendation Algorithm

Deterministic ranking of bookable slots for one center and one date.

Each open slot is scored from its remaining capacity and how quiet its
hour usually is; the best slot is flagged as recommended. No external ML
or randomness - purely rule based.
"""

import logging
from datetime import date as date_cls, datetime
from typing import Dict, Any, List, Union

from app.constants.thresholds import (
    WEIGHT_AVAILABILITY,
    WEIGHT_OFF_PEAK,
    OFF_PEAK_BONUS_BEST,
    OFF_PEAK_BONUS_MIDDAY,
    OFF_PEAK_BONUS_POOR,
    BEST_WINDOWS,
    MIDDAY_WINDOW,
    VERY_LOW_CROWD_RATIO,
    LOW_CROWD_RATIO,
    OFF_PEAK_BASE_WAIT_MINUTES,
    PEAK_BASE_WAIT_MINUTES,
    WAIT_MINUTES_PER_BOOKING,
)

logger = logging.getLogger(__name__)

FALLBACK_REASON = "Best available slot"


# ============================================================================
# Recommendation Functions
# ============================================================================


def recommend_slots(slots: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Score open slots and flag the best one.

    Args:
        slots: Slot dicts with id, center_id, date, time ("HH:MM"),
            capacity and booked_count.

    Returns:
        Open slots sorted by score (highest first), each extended with
        score, is_recommended, reason and estimated_wait_time. Only the
        first element is recommended. Ties keep their input order.
    """
    available = [s for s in slots if s["booked_count"] < s["capacity"]]

    scored = []
    for slot in available:
        hour = _parse_hour(slot["time"])
        scored.append({
            **slot,
            "score": score_slot(slot),
            "is_recommended": False,
            "reason": _build_reason(slot, hour),
            "estimated_wait_time": estimate_wait_minutes(slot),
        })

    # list.sort is stable, so equal scores stay in input order
    scored.sort(key=lambda s: s["score"], reverse=True)

    if scored:
        scored[0]["is_recommended"] = True

    logger.debug(
        f"Scored {len(scored)} open slots (filtered from {len(slots)})"
    )
    return scored


def score_slot(slot: Dict[str, Any]) -> float:
    """
    Score a single slot.

    score = availability * 60 + off-peak bonus * 40, roughly 12-100.
    """
    capacity = slot["capacity"]
    if capacity > 0:
        availability_factor = 1 - slot["booked_count"] / capacity
    else:
        availability_factor = 0.0

    off_peak_bonus = get_off_peak_bonus(_parse_hour(slot["time"]))

    return (
        WEIGHT_AVAILABILITY * availability_factor * 100
        + WEIGHT_OFF_PEAK * off_peak_bonus * 100
    )


def get_off_peak_bonus(hour: int) -> float:
    """Off-peak bonus for the hour a slot starts in."""
    if _in_best_window(hour):
        return OFF_PEAK_BONUS_BEST
    start, end = MIDDAY_WINDOW
    if start <= hour < end:
        return OFF_PEAK_BONUS_MIDDAY
    return OFF_PEAK_BONUS_POOR


def estimate_wait_minutes(slot: Dict[str, Any]) -> int:
    """Expected wait at the center in minutes."""
    if _in_best_window(_parse_hour(slot["time"])):
        base_wait = OFF_PEAK_BASE_WAIT_MINUTES
    else:
        base_wait = PEAK_BASE_WAIT_MINUTES
    return base_wait + slot["booked_count"] * WAIT_MINUTES_PER_BOOKING


def _build_reason(slot: Dict[str, Any], hour: int) -> str:
    """
    Short description of why a slot is attractive.

    Crowd and off-peak labels are independent; there is no label for
    midday or early/late hours.
    """
    capacity = slot["capacity"]
    remaining = capacity - slot["booked_count"]

    parts = []
    if remaining > capacity * VERY_LOW_CROWD_RATIO:
        parts.append("Very low crowd")
    elif remaining > capacity * LOW_CROWD_RATIO:
        parts.append("Low crowd")

    if _in_best_window(hour):
        parts.append("Off-peak hours")

    return " + ".join(parts) or FALLBACK_REASON


def _in_best_window(hour: int) -> bool:
    return any(start <= hour < end for start, end in BEST_WINDOWS)


def _parse_hour(time_str: str) -> int:
    """Hour part of an "HH:MM" (or "HH:MM:SS") string."""
    return int(str(time_str).split(":")[0])


# ============================================================================
# Display Helpers
# ============================================================================


def format_time(time_str: str) -> str:
    """
    Format "HH:MM" as a 12-hour clock string.

    Example:
        >>> format_time("14:05")
        '2:05 PM'
    """
    parts = str(time_str).split(":")
    hour = int(parts[0])
    minute = parts[1] if len(parts) > 1 and parts[1] else "00"
    suffix = "PM" if hour >= 12 else "AM"
    if hour > 12:
        display_hour = hour - 12
    elif hour == 0:
        display_hour = 12
    else:
        display_hour = hour
    return f"{display_hour}:{minute} {suffix}"


def format_date(value: Union[str, date_cls]) -> str:
    """
    Format a calendar day as "Mon, 19 Oct 2026".
    """
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date_cls):
        value = date_cls.fromisoformat(str(value)[:10])
    return f"{value.strftime('%a')}, {value.day} {value.strftime('%b %Y')}"
