"""
Online Profile Update Schemas

Requests to change mobile number, email or address, gated by face
verification and followed through the Center -> VRO -> MRO stages.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from app.schemas.bookings import FaceVerificationRequest

UPDATE_REQUEST_TYPES = ("mobile", "email", "address")
UPDATE_STAGES = ["submitted", "center_verified", "vro_verified", "mro_verified"]
UPDATE_STAGE_LABELS = {
    "submitted": "Request Submitted",
    "center_verified": "Center Verification",
    "vro_verified": "VRO Verification",
    "mro_verified": "MRO Approval",
}


class UpdateRequestCreate(FaceVerificationRequest):
    type: str = Field(..., description="mobile, email or address", pattern="^(mobile|email|address)$")
    new_value: str = Field(..., description="Requested new value", max_length=500)


class UpdateRequest(BaseModel):
    id: str
    user_id: str
    type: str
    new_value: str
    status: str = "pending"
    created_at: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class UpdateRequestTracking(UpdateRequest):
    stages: List[str] = Field(default_factory=lambda: list(UPDATE_STAGES))
    stage_labels: List[str] = Field(default_factory=lambda: [UPDATE_STAGE_LABELS[s] for s in UPDATE_STAGES])
    stage_index: int = Field(..., ge=0)
    is_rejected: bool = False
