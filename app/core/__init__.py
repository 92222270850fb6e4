"""
Core Package

Centralized configuration, logging, error handling, and security utilities
for the booking service.

Modules:
- config: Environment configuration and settings
- logging: Structured logging with trace_id support
- errors: Standardized error classes and HTTP conversion
- security: Password hashing and bearer-token sessions

Usage:
    from app.core import settings, setup_logging, set_trace_id
    from app.core import ValidationError, UnauthorizedError
    from app.core import get_session, Session
"""

# Configuration
from app.core.config import settings, get_settings, is_production

# Logging
from app.core.logging import (
    setup_logging,
    set_trace_id,
    get_trace_id,
    new_trace_id,
    get_logger
)

# Errors
from app.core.errors import (
    AppError,
    ValidationError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    ConflictError,
    ServiceUnavailableError,
    InternalError,
    InvalidReferenceEmbeddingError,
    NoValidLiveCaptureError,
    FaceMismatchError,
    from_http_exception
)

# Security
from app.core.security import (
    Session,
    hash_password,
    verify_password,
    create_session,
    encode_session,
    decode_session,
    get_session,
    require_auth,
    parse_bearer_token
)

__all__ = [
    # Config
    "settings",
    "get_settings",
    "is_production",

    # Logging
    "setup_logging",
    "set_trace_id",
    "get_trace_id",
    "new_trace_id",
    "get_logger",

    # Errors
    "AppError",
    "ValidationError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "ConflictError",
    "ServiceUnavailableError",
    "InternalError",
    "InvalidReferenceEmbeddingError",
    "NoValidLiveCaptureError",
    "FaceMismatchError",
    "from_http_exception",

    # Security
    "Session",
    "hash_password",
    "verify_password",
    "create_session",
    "encode_session",
    "decode_session",
    "get_session",
    "require_auth",
    "parse_bearer_token",
]
