"""
Constants Package

Centralized constants for the booking service.

Exports:
- Threshold values (slot scoring weights and windows, face match, age milestones)

Safe to import anywhere - no heavy dependencies or circular imports.
"""

from .thresholds import (
    WEIGHT_AVAILABILITY,
    WEIGHT_OFF_PEAK,
    BEST_WINDOWS,
    MIDDAY_WINDOW,
    EMBEDDING_LENGTH,
    BOOKING_MATCH_THRESHOLD,
    PROFILE_UPDATE_MATCH_THRESHOLD,
    MILESTONE_AGES,
    MILESTONE_WINDOW_DAYS,
)

__all__ = [
    "WEIGHT_AVAILABILITY",
    "WEIGHT_OFF_PEAK",
    "BEST_WINDOWS",
    "MIDDAY_WINDOW",
    "EMBEDDING_LENGTH",
    "BOOKING_MATCH_THRESHOLD",
    "PROFILE_UPDATE_MATCH_THRESHOLD",
    "MILESTONE_AGES",
    "MILESTONE_WINDOW_DAYS",
]
