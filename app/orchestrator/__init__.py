"""
Orchestrator Package - Assistant Message Routing

Keyword-based topic detection and canned answers for the help assistant.
"""

from app.orchestrator.intent_detector import (
    TopicResult,
    answer_for,
    detect_topic,
)

__all__ = [
    "TopicResult",
    "answer_for",
    "detect_topic",
]
