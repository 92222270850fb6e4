"""
User and Authentication Schemas

Registration, login and profile payloads. The stored face embedding and
password hash never leave the service.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator

from app.constants.thresholds import EMBEDDING_LENGTH

SUPPORTED_LANGUAGES = ("en", "hi", "te")


class RegisterRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    aadhaar_number: str = Field(..., description="12-digit Aadhaar number", pattern=r"^\d{12}$")
    name: str = Field(..., description="Full name", min_length=1, max_length=120)
    email: str = Field(..., description="Email address", pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    mobile: str = Field(..., description="10-digit mobile number", pattern=r"^\d{10}$")
    date_of_birth: str = Field(..., description="Date of birth (YYYY-MM-DD)", pattern=r"^\d{4}-\d{2}-\d{2}$")
    password: str = Field(..., description="Password", min_length=8, max_length=72)
    preferred_language: str = Field("en", description="UI language")
    face_embedding: List[float] = Field(..., description="128-float face embedding captured at registration")
    face_image_base64: Optional[str] = Field(None, description="Captured face image (JPEG data URL or base64)")

    @field_validator("face_embedding")
    @classmethod
    def _check_embedding(cls, value: List[float]) -> List[float]:
        if len(value) != EMBEDDING_LENGTH:
            raise ValueError(f"face_embedding must have {EMBEDDING_LENGTH} values")
        return value

    @field_validator("preferred_language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(f"preferred_language must be one of {SUPPORTED_LANGUAGES}")
        return value


class LoginRequest(BaseModel):
    aadhaar_number: str = Field(..., description="12-digit Aadhaar number", min_length=1)
    password: str = Field(..., description="Password", min_length=1)


class LanguageUpdateRequest(BaseModel):
    preferred_language: str = Field(..., description="UI language")

    @field_validator("preferred_language")
    @classmethod
    def _check_language(cls, value: str) -> str:
        if value not in SUPPORTED_LANGUAGES:
            raise ValueError(f"preferred_language must be one of {SUPPORTED_LANGUAGES}")
        return value


class Milestone(BaseModel):
    type: str = Field(..., description="15th_birthday or 50th_birthday")
    days_remaining: int = Field(..., ge=0)
    birthday_date: str
    message: str


class UserProfile(BaseModel):
    """Public view of a user row."""
    id: str
    aadhaar_number: str
    name: str
    email: str = ""
    mobile: str = ""
    date_of_birth: Optional[str] = None
    preferred_language: str = "en"
    face_image_url: Optional[str] = None
    has_face_registered: bool = False
    role: str = "citizen"

    model_config = ConfigDict(extra="ignore")
