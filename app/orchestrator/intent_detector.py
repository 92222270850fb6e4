"""
Topic Detector - Help Assistant Keyword Matching

Deterministic topic detection for the in-app help assistant.
Rules are checked in priority order; the first topic with a matching rule
wins. Patterns include common Hindi and Telugu keywords.

Supported topics:
- booking
- recommendation
- milestone
- qr_whatsapp
- documents
- verification
- tracking
- admin
- reschedule
- biometric
- help
- out_of_scope
"""

import re
import logging
from typing import List, Tuple
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class TopicResult:
    """Topic detection result with confidence and reasoning."""
    topic: str
    confidence: float
    reasoning: List[str]  # Matched rules


# ============================================================================
# Topic Patterns (Priority Ordered - Higher Priority First)
# ============================================================================

TOPIC_PATTERNS: List[Tuple[str, List[Tuple[str, str, float]]]] = [
    ("booking", [
        (r"(book|slot|schedule|appointment|बुक|స్లాట్|स्लॉट)", "booking_keyword", 0.90),
    ]),
    ("recommendation", [
        (r"(recommend|ai slot|best time|smart pick|best center)", "recommendation_keyword", 0.90),
    ]),
    ("milestone", [
        (r"(age|\b5\b|\b15\b|\b50\b|child|kid|milestone|birthday|alert|risk|upcoming|urgent|priority)", "milestone_keyword", 0.85),
    ]),
    ("qr_whatsapp", [
        (r"(qr|code|whatsapp|share|message)", "qr_keyword", 0.85),
    ]),
    ("documents", [
        (r"(document|proof|required|certificate|id proof|address proof|doc)", "documents_keyword", 0.85),
    ]),
    ("verification", [
        (r"(verify|verification|stage|vro|mro|flow|approve|reject|process)", "verification_keyword", 0.85),
    ]),
    ("tracking", [
        (r"(track|status|update request|check|स्थिति|ట్రాక్|ट्रैक)", "tracking_keyword", 0.85),
    ]),
    ("admin", [
        (r"(admin|demo|tool|test|simulate)", "admin_keyword", 0.80),
    ]),
    ("reschedule", [
        (r"(reschedule|cancel|change time|postpone|delete booking)", "reschedule_keyword", 0.85),
    ]),
    ("biometric", [
        (r"(biometric|face|scan|fingerprint|iris|photo|auth|update|change|address|name|मोबाइल|अपडेट|అప్‌డేట్)", "biometric_keyword", 0.80),
    ]),
    ("help", [
        (r"(hello|hi|hey|help|how|namaste|नमस्ते|హలో|सहायता|సహాయం)", "help_keyword", 0.75),
    ]),
]

TOPIC_ANSWERS = {
    "booking": (
        "To book a slot, select your update type, pick a center and date, and choose one of the "
        "recommended slots. Your face is verified before the booking is confirmed."
    ),
    "recommendation": (
        "Slots are ranked by how much capacity is left and how quiet the hour usually is. "
        "Off-peak hours (9-11 AM and 2-4 PM) score best and the top slot is marked as recommended."
    ),
    "milestone": (
        "Biometric updates are mandatory around your 15th and 50th birthdays. "
        "You will see a reminder from 90 days before the birthday."
    ),
    "qr_whatsapp": (
        "Once a slot is booked you receive a booking reference for quick check-in at the center, "
        "which you can share with others."
    ),
    "documents": (
        "Required documents depend on the update type: Address (Utility bill, Rent agreement), "
        "Name/DOB (Passport, Birth Certificate, PAN). Biometric updates usually only require your current Aadhaar."
    ),
    "verification": (
        "Updates follow a multi-stage workflow: started at the Aadhaar Center, verified by the VRO "
        "(Village Revenue Officer), and approved or rejected by the MRO (Mandal Revenue Officer)."
    ),
    "tracking": (
        "You can track the stage of your bookings (Booked -> Confirmed -> Completed) and of your "
        "update requests (Center -> VRO -> MRO) from your bookings and profile pages."
    ),
    "admin": (
        "Verification stages are set by center, VRO and MRO staff. Citizens can only view them."
    ),
    "reschedule": (
        "You can cancel an existing booking from your bookings page and then book a new slot."
    ),
    "biometric": (
        "You can update your mobile number, email or address online after a face check, or book a "
        "center appointment for biometric, name or date-of-birth updates."
    ),
    "help": (
        "I can help with slot booking, tracking verifications, age-based alerts, booking references, "
        "and required documents. How can I assist?"
    ),
    "out_of_scope": "I am designed to assist with Aadhaar booking and update services.",
}


# ============================================================================
# Detection
# ============================================================================


def detect_topic(message: str) -> TopicResult:
    """
    Detect the help topic of a message.

    Args:
        message: User message

    Returns:
        TopicResult; "out_of_scope" when no rule matches
    """
    if not message or not message.strip():
        return TopicResult(
            topic="out_of_scope",
            confidence=0.0,
            reasoning=["empty_message"]
        )

    message_lower = message.lower().strip()

    for topic, patterns in TOPIC_PATTERNS:
        reasons = []
        confidence = 0.0

        for pattern, rule_name, rule_confidence in patterns:
            if re.search(pattern, message_lower, re.IGNORECASE):
                reasons.append(rule_name)
                confidence = max(confidence, rule_confidence)

        if reasons:
            logger.debug(f"Detected topic: {topic} (conf={confidence:.2f}, reasons={reasons})")
            return TopicResult(topic=topic, confidence=confidence, reasoning=reasons)

    return TopicResult(
        topic="out_of_scope",
        confidence=0.5,
        reasoning=["no_pattern_matched"]
    )


def answer_for(topic: str) -> str:
    """Canned answer for a topic."""
    return TOPIC_ANSWERS.get(topic, TOPIC_ANSWERS["out_of_scope"])
