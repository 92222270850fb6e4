"""
Profile Update API Endpoints

Online mobile/email/address change requests gated by a face check.

Endpoints:
- POST /profile/update-requests - Verify face and submit a change request
- GET /profile/update-requests - Own requests with stage progress

**Requires authentication**
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from app.algorithms.face_matcher import VerificationFlow, verify_face
from app.api.common import standard_response, short_trace
from app.core.errors import (
    ConflictError,
    FaceMismatchError,
    InvalidReferenceEmbeddingError,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import Session, get_session
from app.schemas.bookings import MatchDecisionModel
from app.schemas.update_requests import (
    UPDATE_STAGES,
    UpdateRequestCreate,
    UpdateRequestTracking,
)
from app.tools import backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

# Backend status -> index into UPDATE_STAGES
STATUS_STAGE_INDEX = {
    "pending": 0,
    "submitted": 0,
    "center_verified": 1,
    "vro_verified": 2,
    "mro_verified": 3,
    "approved": 3,
}


# ============================================================================
# Helpers
# ============================================================================

def track_update_request(request: Dict[str, Any]) -> Dict[str, Any]:
    """Attach Center -> VRO -> MRO stage progress to an update request."""
    status_value = str(request.get("status") or "pending").lower()
    return UpdateRequestTracking(
        **request,
        stage_index=STATUS_STAGE_INDEX.get(status_value, 0),
        is_rejected=status_value == "rejected",
    ).model_dump()


def _current_value(user: Dict[str, Any], request_type: str) -> str:
    if request_type == "mobile":
        return str(user.get("mobile") or "")
    if request_type == "email":
        return str(user.get("email") or "")
    return str(user.get("address") or "")


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/update-requests", status_code=status.HTTP_201_CREATED)
async def create_update_request(
    body: UpdateRequestCreate,
    session: Session = Depends(get_session)
):
    """
    Submit a change request after a face check under the profile threshold.

    Only one pending request per type is allowed.
    """
    user = await backend_client.get_user(session.user_id)
    if not user:
        raise UnauthorizedError(
            message="Account not found. Please log in again.",
            details={"reason": "unknown_user"}
        )

    if not user.get("face_descriptor"):
        raise InvalidReferenceEmbeddingError(
            message="Face verification unavailable. No face registered on this account.",
            details={"reason": "missing"}
        )

    new_value = body.new_value.strip()
    if not new_value:
        raise ValidationError(message="Please enter a new value", details={"field": "new_value"})

    if new_value == _current_value(user, body.type):
        raise ValidationError(
            message="New value cannot be same as existing value",
            details={"field": "new_value"}
        )

    pending = await backend_client.find_pending_update_request(session.user_id, body.type)
    if pending:
        raise ConflictError(
            message="You already have a pending request for this update type",
            details={"type": body.type}
        )

    decision = verify_face(user["face_descriptor"], body.live_embeddings, VerificationFlow.PROFILE_UPDATE)
    if not decision.matched:
        raise FaceMismatchError(
            message="Face verification failed. Request denied.",
            details={
                "confidence": decision.confidence,
                "avg_distance": round(decision.avg_distance, 4),
                "threshold": decision.threshold,
            }
        )

    request = await backend_client.insert_update_request({
        "user_id": session.user_id,
        "type": body.type,
        "new_value": new_value,
        "status": "pending",
    })

    logger.info(f"[{short_trace()}] Update request {request.get('id')} ({body.type}) submitted by {session.user_id}")

    return standard_response(
        message="Face Verified. Your update request has been submitted successfully.",
        data={
            "request": track_update_request(request),
            "verification": MatchDecisionModel(**decision.to_dict()).model_dump(),
        },
        user_id=session.user_id
    )


@router.get("/update-requests")
async def list_update_requests(session: Session = Depends(get_session)):
    """Own update requests, newest first."""
    requests = [
        track_update_request(r)
        for r in await backend_client.list_update_requests(session.user_id)
    ]
    return standard_response(
        message=f"{len(requests)} update requests",
        data={"requests": requests, "stages": UPDATE_STAGES, "total_count": len(requests)},
        user_id=session.user_id,
        source="backend"
    )
