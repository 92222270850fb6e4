"""
Algorithms Package

Deterministic scoring and decision functions:
- slot_recommender: Slot ranking by availability and off-peak hours
- face_matcher: Face embedding distance and match decision
- age_milestone: 15th/50th birthday re-verification window

All algorithms are pure (no I/O, no randomness).
"""

from app.algorithms.slot_recommender import recommend_slots
from app.algorithms.face_matcher import decide_match, verify_face, VerificationFlow
from app.algorithms.age_milestone import check_age_milestone

__all__ = [
    "recommend_slots",
    "decide_match",
    "verify_face",
    "VerificationFlow",
    "check_age_milestone",
]
