"""
API Package - FastAPI Routers

Exports the aggregated router for main app registration.
"""

from app.api.router import api_router

# API Version
API_VERSION = "1.0.0"

__all__ = [
    "api_router",
    "API_VERSION",
]
