"""
Auth API Endpoints

Registration with face capture, login and profile.

Endpoints:
- POST /auth/register - Create an account (face embedding required)
- POST /auth/login - Exchange Aadhaar number + password for a session token
- GET /auth/me - Current profile and upcoming age milestone
- PUT /auth/language - Change preferred language
"""

import base64
import binascii
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, status

from app.algorithms.age_milestone import check_age_milestone, milestone_message
from app.api.common import standard_response, short_trace
from app.core.config import settings
from app.core.errors import (
    AppError,
    ConflictError,
    UnauthorizedError,
    ValidationError,
)
from app.core.security import (
    Session,
    create_session,
    encode_session,
    get_session,
    hash_password,
    verify_password,
)
from app.schemas.users import (
    LanguageUpdateRequest,
    LoginRequest,
    Milestone,
    RegisterRequest,
    UserProfile,
)
from app.tools import backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

INVALID_CREDENTIALS = "Invalid Aadhaar number or password."


# ============================================================================
# Helpers
# ============================================================================

def public_profile(user: Dict[str, Any]) -> Dict[str, Any]:
    """Profile fields safe to return to the client."""
    return UserProfile(
        **user,
        has_face_registered=bool(user.get("face_descriptor"))
    ).model_dump()


def milestone_payload(dob: Optional[str]) -> Optional[Dict[str, Any]]:
    """Upcoming 15th/50th birthday reminder for a date of birth, if any."""
    info = check_age_milestone(dob, window_days=settings.MILESTONE_WINDOW_DAYS)
    if info is None:
        return None
    return Milestone(
        type=info.type,
        days_remaining=info.days_remaining,
        birthday_date=info.birthday_date.isoformat(),
        message=milestone_message(info),
    ).model_dump()


def _decode_image(data_url: str) -> bytes:
    """Decode a base64 JPEG, with or without a data: URL prefix."""
    encoded = data_url.split(",", 1)[1] if data_url.startswith("data:") else data_url
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(
            message="Face image is not valid base64 data",
            details={"field": "face_image_base64"}
        )


async def _load_user(session: Session) -> Dict[str, Any]:
    user = await backend_client.get_user(session.user_id)
    if not user:
        raise UnauthorizedError(
            message="Account not found. Please log in again.",
            details={"reason": "unknown_user"}
        )
    return user


# ============================================================================
# Endpoints
# ============================================================================

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest):
    """
    Create an account.

    The face embedding captured at registration becomes the reference for
    every later face check. The face image is optional and stored in the
    face bucket; if the upload fails the account is still created.
    """
    existing = await backend_client.get_user_by_aadhaar(body.aadhaar_number)
    if existing:
        raise ConflictError(message="Aadhaar number already registered.")

    face_image_url = None
    if body.face_image_base64:
        image = _decode_image(body.face_image_base64)
        filename = f"{body.aadhaar_number}-{int(time.time() * 1000)}.jpg"
        try:
            face_image_url = await backend_client.upload_face_image(filename, image)
        except AppError as e:
            logger.warning(f"[{short_trace()}] Face image upload failed: {e.message}")

    user = await backend_client.insert_user({
        "aadhaar_number": body.aadhaar_number,
        "name": body.name,
        "email": body.email,
        "mobile": body.mobile,
        "phone": body.mobile,
        "date_of_birth": body.date_of_birth,
        "password_hash": hash_password(body.password),
        "preferred_language": body.preferred_language,
        "face_image_url": face_image_url,
        "face_descriptor": body.face_embedding,
        "is_active": True,
        "is_verified": False,
    })

    logger.info(f"[{short_trace()}] Registered user {user.get('id')}")

    return standard_response(
        message="Registration successful. Please log in.",
        data={"user": public_profile(user)},
        source="backend"
    )


@router.post("/login")
async def login(body: LoginRequest):
    """Verify credentials and issue a session token."""
    user = await backend_client.get_user_by_aadhaar(body.aadhaar_number)
    if not user or not verify_password(body.password, user.get("password_hash")):
        raise UnauthorizedError(message=INVALID_CREDENTIALS)

    session = create_session(user)
    token = encode_session(session)

    await backend_client.update_user(
        user["id"],
        {"last_login": datetime.now(timezone.utc).isoformat()}
    )

    logger.info(f"[{short_trace()}] User {user['id']} logged in")

    return standard_response(
        message=f"Welcome, {user['name']}",
        data={
            "token": token,
            "token_type": "bearer",
            "expires_at": session.expires_at.isoformat(),
            "user": public_profile(user),
            "milestone": milestone_payload(user.get("date_of_birth")),
        },
        user_id=user["id"]
    )


@router.get("/me")
async def me(session: Session = Depends(get_session)):
    """Current profile and upcoming milestone."""
    user = await _load_user(session)
    return standard_response(
        message="Profile loaded",
        data={
            "user": public_profile(user),
            "milestone": milestone_payload(user.get("date_of_birth")),
        },
        user_id=session.user_id
    )


@router.put("/language")
async def update_language(
    body: LanguageUpdateRequest,
    session: Session = Depends(get_session)
):
    """Change the preferred UI language."""
    user = await backend_client.update_user(
        session.user_id,
        {"preferred_language": body.preferred_language}
    )
    if not user:
        user = await _load_user(session)

    return standard_response(
        message="Language updated",
        data={"user": public_profile(user)},
        user_id=session.user_id
    )
