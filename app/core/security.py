"""
Core Security Module

Password hashing and session handling for API endpoints.

A logged-in citizen is represented by an explicit Session that is encoded
in a signed bearer token and resolved per request by the get_session
dependency. Nothing about the current user is kept in module state.

Usage:
    from app.core.security import get_session, Session

    @router.get("/me")
    async def me(session: Session = Depends(get_session)):
        ...
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Header
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

CITIZEN_ROLE = "citizen"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


# ==================== Passwords ====================

def hash_password(password: str) -> str:
    """Hash password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify password against a bcrypt hash.

    Returns False for a missing or malformed hash instead of raising.
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning("Stored password hash could not be parsed")
        return False


# ==================== Sessions ====================

@dataclass
class Session:
    """Authenticated citizen session carried by a bearer token."""
    user_id: str
    aadhaar_number: str
    name: str
    role: str
    issued_at: datetime
    expires_at: datetime

    def to_claims(self) -> Dict[str, Any]:
        return {
            "sub": self.user_id,
            "aadhaar": self.aadhaar_number,
            "name": self.name,
            "role": self.role,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }


def create_session(user: Dict[str, Any], now: Optional[datetime] = None) -> Session:
    """
    Build a new Session for a user row.

    Args:
        user: Normalized user dict (needs id, aadhaar_number, name)
        now: Optional issue time (defaults to current UTC time)
    """
    issued_at = (now or datetime.now(timezone.utc)).replace(microsecond=0)
    return Session(
        user_id=str(user["id"]),
        aadhaar_number=str(user.get("aadhaar_number") or ""),
        name=str(user.get("name") or ""),
        role=str(user.get("role") or CITIZEN_ROLE),
        issued_at=issued_at,
        expires_at=issued_at + timedelta(minutes=settings.SESSION_TTL_MINUTES),
    )


def encode_session(session: Session) -> str:
    """Sign a Session into a bearer token string."""
    return jwt.encode(
        session.to_claims(),
        settings.SESSION_SECRET,
        algorithm=settings.SESSION_ALGORITHM
    )


def decode_session(token: str) -> Session:
    """
    Verify a bearer token and rebuild its Session.

    Raises:
        UnauthorizedError: If the token is invalid, expired or incomplete
    """
    try:
        claims = jwt.decode(
            token,
            settings.SESSION_SECRET,
            algorithms=[settings.SESSION_ALGORITHM]
        )
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        raise UnauthorizedError(
            message="Session expired or invalid. Please log in again.",
            details={"reason": "invalid_token"}
        )

    if not claims.get("sub"):
        raise UnauthorizedError(
            message="Session expired or invalid. Please log in again.",
            details={"reason": "missing_subject"}
        )

    return Session(
        user_id=str(claims["sub"]),
        aadhaar_number=str(claims.get("aadhaar") or ""),
        name=str(claims.get("name") or ""),
        role=str(claims.get("role") or CITIZEN_ROLE),
        issued_at=datetime.fromtimestamp(claims.get("iat", 0), tz=timezone.utc),
        expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
    )


# ==================== Authentication ====================

def require_auth(auth_header: Optional[str], allow_empty: bool = False) -> str:
    """
    Require authentication header to be present.

    Raises:
        UnauthorizedError: If auth_header is None or empty (when not allowed)
    """
    if auth_header is None:
        raise UnauthorizedError(
            message="Authentication required",
            details={"reason": "Missing Authorization header"}
        )

    if not allow_empty and not auth_header.strip():
        raise UnauthorizedError(
            message="Authentication required",
            details={"reason": "Empty Authorization header"}
        )

    return auth_header


def parse_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """
    Extract bearer token from Authorization header.

    Example:
        >>> parse_bearer_token("Bearer abc123")
        'abc123'
    """
    if not auth_header:
        return None

    parts = auth_header.split()
    if len(parts) != 2:
        return None

    if parts[0].lower() != "bearer":
        return None

    return parts[1]


async def get_session(authorization: Optional[str] = Header(None)) -> Session:
    """
    FastAPI dependency resolving the caller's Session from the Authorization header.

    Raises:
        UnauthorizedError: If the header is missing or the token is not valid
    """
    auth_header = require_auth(authorization)
    token = parse_bearer_token(auth_header)
    if not token:
        raise UnauthorizedError(
            message="Authentication required",
            details={"reason": "Expected a bearer token"}
        )
    return decode_session(token)
