"""
Threshold Constants

Centralized threshold values used by the scoring and verification algorithms.

IMPORTANT: These values MUST stay in sync with algorithm implementations.
Values are documented with SYNC comments showing which algorithm uses them.
"""

# ============================================================================
# Slot Scoring
# SYNC WITH: app/algorithms/slot_recommender.py
# ============================================================================

# Score weights (score = availability * 60 + off-peak bonus * 40)
WEIGHT_AVAILABILITY = 0.6
WEIGHT_OFF_PEAK = 0.4

# Off-peak bonus by window
OFF_PEAK_BONUS_BEST = 1.0   # 09:00-11:00 and 14:00-16:00
OFF_PEAK_BONUS_MIDDAY = 0.5  # 11:00-14:00
OFF_PEAK_BONUS_POOR = 0.3   # before 09:00, from 16:00

# Half-open [start, end) hour windows
BEST_WINDOWS = ((9, 11), (14, 16))
MIDDAY_WINDOW = (11, 14)

# Remaining-capacity ratios used for crowd labels
VERY_LOW_CROWD_RATIO = 0.7
LOW_CROWD_RATIO = 0.4

# Estimated wait (minutes)
OFF_PEAK_BASE_WAIT_MINUTES = 10
PEAK_BASE_WAIT_MINUTES = 25
WAIT_MINUTES_PER_BOOKING = 2


# ============================================================================
# Face Verification
# SYNC WITH: app/algorithms/face_matcher.py
# ============================================================================

EMBEDDING_LENGTH = 128

# Defaults only; runtime values come from settings so they can be tuned per deployment
BOOKING_MATCH_THRESHOLD = 0.45
PROFILE_UPDATE_MATCH_THRESHOLD = 0.5


# ============================================================================
# Age Milestones
# SYNC WITH: app/algorithms/age_milestone.py
# ============================================================================

MILESTONE_AGES = (15, 50)
MILESTONE_WINDOW_DAYS = 90
