"""
Core Configuration Module

Centralizes environment configuration for the booking service.
Provides a singleton Settings object with defaults suitable for local development.

Usage:
    from app.core.config import settings

    print(settings.APP_ENV)
    print(settings.BACKEND_URL)
"""

import os
from typing import List, Optional

from app.constants import thresholds

DEV_SESSION_SECRET = "dev-session-secret-change-me"


class Settings:
    """
    Application settings loaded from environment variables.

    Values are read on every access so tests can override them with
    monkeypatch.setenv() without rebuilding the singleton.
    """

    # ==================== Application Settings ====================

    @property
    def APP_ENV(self) -> str:
        """Application environment: dev, staging, production"""
        return os.getenv("APP_ENV", "dev")

    @property
    def LOG_LEVEL(self) -> str:
        """Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"""
        return os.getenv("LOG_LEVEL", "INFO")

    # ==================== Hosted Backend ====================

    @property
    def BACKEND_URL(self) -> str:
        """Base URL of the hosted database/storage backend"""
        return os.getenv("BACKEND_URL", "http://localhost:54321").rstrip("/")

    @property
    def BACKEND_API_KEY(self) -> Optional[str]:
        """API key sent as both apikey and bearer token to the backend"""
        return os.getenv("BACKEND_API_KEY")

    @property
    def FACE_BUCKET(self) -> str:
        """Storage bucket for registration face images"""
        return os.getenv("FACE_BUCKET", "faces")

    # ==================== HTTP Client Settings ====================

    @property
    def BACKEND_CLIENT_TIMEOUT(self) -> float:
        """Backend HTTP client timeout in seconds"""
        return float(os.getenv("BACKEND_CLIENT_TIMEOUT", "10.0"))

    @property
    def BACKEND_CLIENT_MAX_CONNECTIONS(self) -> int:
        """Maximum HTTP connections in pool"""
        return int(os.getenv("BACKEND_CLIENT_MAX_CONNECTIONS", "50"))

    @property
    def BACKEND_CLIENT_MAX_KEEPALIVE(self) -> int:
        """Maximum keepalive connections in pool"""
        return int(os.getenv("BACKEND_CLIENT_MAX_KEEPALIVE", "10"))

    # ==================== CORS Settings ====================

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Allowed CORS origins"""
        origins_str = os.getenv("CORS_ORIGINS", "*")
        if origins_str == "*":
            return ["*"]
        return [origin.strip() for origin in origins_str.split(",")]

    @property
    def CORS_ALLOW_CREDENTIALS(self) -> bool:
        """Allow credentials in CORS requests"""
        return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"

    # ==================== Session Settings ====================

    @property
    def SESSION_SECRET(self) -> str:
        """Secret used to sign session tokens"""
        return os.getenv("SESSION_SECRET", DEV_SESSION_SECRET)

    @property
    def SESSION_ALGORITHM(self) -> str:
        """Session token signing algorithm"""
        return os.getenv("SESSION_ALGORITHM", "HS256")

    @property
    def SESSION_TTL_MINUTES(self) -> int:
        """Session lifetime in minutes"""
        return int(os.getenv("SESSION_TTL_MINUTES", str(60 * 24)))

    # ==================== Biometric Thresholds ====================

    @property
    def BOOKING_MATCH_THRESHOLD(self) -> float:
        """Maximum (exclusive) average face distance accepted before a booking"""
        return float(os.getenv("BOOKING_MATCH_THRESHOLD", str(thresholds.BOOKING_MATCH_THRESHOLD)))

    @property
    def PROFILE_UPDATE_MATCH_THRESHOLD(self) -> float:
        """Maximum (exclusive) average face distance accepted for profile updates"""
        return float(os.getenv("PROFILE_UPDATE_MATCH_THRESHOLD", str(thresholds.PROFILE_UPDATE_MATCH_THRESHOLD)))

    # ==================== Booking Settings ====================

    @property
    def BOOKING_WINDOW_DAYS(self) -> int:
        """Number of days (starting today) offered for booking"""
        return int(os.getenv("BOOKING_WINDOW_DAYS", "7"))

    @property
    def MILESTONE_WINDOW_DAYS(self) -> int:
        """Days before a 15th/50th birthday that trigger the re-verification prompt"""
        return int(os.getenv("MILESTONE_WINDOW_DAYS", str(thresholds.MILESTONE_WINDOW_DAYS)))


# ==================== Singleton Instance ====================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the singleton Settings instance.

    Returns:
        Settings object with configuration values

    Example:
        >>> from app.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.APP_ENV)
        'dev'
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


# Convenience singleton for direct import
settings = get_settings()


# ==================== Helper Functions ====================

def is_production() -> bool:
    """
    Check if the application is running in production environment.

    Returns:
        True if APP_ENV is 'production' or 'prod'
    """
    env = settings.APP_ENV.lower()
    return env in ("production", "prod")



def check_production_settings() -> None:
    """
    Refuse to run in production with development-only settings.

    Raises:
        RuntimeError: If SESSION_SECRET is unset (or left at the development
            default) while APP_ENV is production
    """
    if not is_production():
        return
    if settings.SESSION_SECRET == DEV_SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set when APP_ENV is production")
