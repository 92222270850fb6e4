"""
Central API Router

Aggregates all endpoint routers for the appointment booking service.
"""

import logging
from fastapi import APIRouter

from app.api import auth, bookings, chat, profile, slots

logger = logging.getLogger(__name__)

# Main API router
api_router = APIRouter()

# Router configurations: (module, prefix, tags)
ROUTER_CONFIGS = [
    (auth, "/auth", ["Auth"]),
    (slots, "", ["Slot Recommendation"]),
    (bookings, "/bookings", ["Bookings"]),
    (profile, "/profile", ["Profile Updates"]),
    (chat, "", ["Assistant"]),
]

for module, prefix, tags in ROUTER_CONFIGS:
    api_router.include_router(module.router, prefix=prefix, tags=tags)
    logger.debug(f"Registered {module.__name__} router at '{prefix or '/'}'")
