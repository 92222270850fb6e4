"""
Face Match Decision

Compares live face embeddings against the embedding stored at registration
and decides whether they belong to the same person.

Embeddings are 128-float vectors produced by the face-recognition model in
the browser. Distances are Euclidean; when several frames are captured the
per-frame distances are averaged (not the embeddings). A match requires the
average distance to be strictly below the threshold of the calling flow.
"""

import json
import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from app.constants.thresholds import EMBEDDING_LENGTH
from app.core.config import settings
from app.core.errors import InvalidReferenceEmbeddingError, NoValidLiveCaptureError

logger = logging.getLogger(__name__)


class VerificationFlow(str, Enum):
    """Call sites of the face gate; each has its own threshold."""
    BOOKING = "booking"
    PROFILE_UPDATE = "profile_update"


@dataclass
class MatchDecision:
    matched: bool
    avg_distance: float
    confidence: int
    threshold: float
    frames_used: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def threshold_for(flow: VerificationFlow) -> float:
    """Configured distance threshold for a verification flow."""
    if flow == VerificationFlow.BOOKING:
        return settings.BOOKING_MATCH_THRESHOLD
    return settings.PROFILE_UPDATE_MATCH_THRESHOLD


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """sqrt(sum((a_i - b_i)^2)) over two equal-length vectors."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def parse_reference_embedding(raw: Any) -> List[float]:
    """
    Validate the embedding stored on a user profile.

    Accepts a list of numbers or a JSON string holding one.

    Raises:
        InvalidReferenceEmbeddingError: If missing, unparseable or not 128 finite numbers
    """
    if raw is None:
        raise InvalidReferenceEmbeddingError(
            message="No face registered for this account. Please update your profile first.",
            details={"reason": "missing"}
        )

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise InvalidReferenceEmbeddingError(details={"reason": "unparseable"})

    if not isinstance(raw, (list, tuple)) or len(raw) != EMBEDDING_LENGTH:
        raise InvalidReferenceEmbeddingError(details={"reason": "wrong_length"})

    try:
        values = [float(v) for v in raw]
    except (TypeError, ValueError):
        raise InvalidReferenceEmbeddingError(details={"reason": "non_numeric"})

    # json.loads accepts NaN and Infinity literals
    if not _is_finite(values):
        raise InvalidReferenceEmbeddingError(details={"reason": "non_numeric"})
    return values


def _is_finite(vector: Sequence[float]) -> bool:
    return bool(np.isfinite(np.asarray(vector, dtype=np.float64)).all())


def _valid_captures(live_embeddings: Sequence[Optional[Sequence[float]]]) -> List[Sequence[float]]:
    return [
        e for e in live_embeddings
        if e is not None and len(e) == EMBEDDING_LENGTH and _is_finite(e)
    ]


def decide_match(
    reference: Sequence[float],
    live_embeddings: Sequence[Optional[Sequence[float]]],
    threshold: float
) -> MatchDecision:
    """
    Decide whether live captures match the stored reference.

    Args:
        reference: Validated 128-float stored embedding
        live_embeddings: One or more live captures; wrong-length or non-finite ones are skipped
        threshold: Exclusive upper bound on the average distance

    Returns:
        MatchDecision with the averaged distance and display confidence

    Raises:
        NoValidLiveCaptureError: If no capture has the expected length and finite values
    """
    captures = _valid_captures(live_embeddings)
    if not captures:
        raise NoValidLiveCaptureError(
            details={"supplied": len(live_embeddings), "expected_length": EMBEDDING_LENGTH}
        )

    distances = [euclidean_distance(capture, reference) for capture in captures]
    avg_distance = sum(distances) / len(distances)

    # Display value only; the decision uses the raw distance
    confidence = round((1 - avg_distance) * 100)
    matched = avg_distance < threshold

    if matched:
        message = f"Face Verified Successfully (Match Confidence: {confidence}%)"
    else:
        message = f"Face Verification Failed. (Match Confidence: {confidence}%)"

    logger.info(
        f"Face match: avg_distance={avg_distance:.4f} threshold={threshold} "
        f"frames={len(captures)}/{len(live_embeddings)} -> {matched}"
    )

    return MatchDecision(
        matched=matched,
        avg_distance=avg_distance,
        confidence=confidence,
        threshold=threshold,
        frames_used=len(captures),
        message=message,
    )


def verify_face(
    stored_embedding: Any,
    live_embeddings: Sequence[Optional[Sequence[float]]],
    flow: VerificationFlow
) -> MatchDecision:
    """
    Validate the stored embedding and decide under the flow's threshold.

    Raises:
        InvalidReferenceEmbeddingError: Stored embedding unusable
        NoValidLiveCaptureError: No usable live capture
    """
    reference = parse_reference_embedding(stored_embedding)
    return decide_match(reference, live_embeddings, threshold_for(flow))
