"""
Hosted Backend HTTP Client

Async interface to the hosted database (PostgREST-style REST endpoints)
and storage API that hold users, centers, slots, bookings and update
requests. Uses a module-level singleton AsyncClient for connection pooling.

Functions:
- get_centers / get_center: Service centers
- get_slots / get_slot / increment_slot_booked_count: Slot rows
- get_user / get_user_by_aadhaar / insert_user / update_user: User rows
- upload_face_image: Store a registration face image
- find_active_booking / insert_booking / list_bookings / get_booking / update_booking_status
- list_update_requests / find_pending_update_request / insert_update_request
- aclose_client: Close HTTP client (call during shutdown)

Backend failures are raised as AppError subclasses; backend error text is
logged but not returned to callers.
"""

import logging
from typing import Optional, Dict, Any, List

import httpx

from app.core.config import settings
from app.core.errors import (
    AppError,
    ConflictError,
    ServiceUnavailableError,
    InternalError,
    from_http_exception,
)
from app.core.logging import get_trace_id

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
STORAGE_PREFIX = "/storage/v1/object"

ACTIVE_BOOKING_STATUSES = ("Booked", "Confirmed")


# ============================================================================
# Module-level HTTP Client
# ============================================================================

_client: Optional[httpx.AsyncClient] = None


def get_client() -> httpx.AsyncClient:
    """Get or create module-level httpx.AsyncClient singleton."""
    global _client

    if _client is None or _client.is_closed:
        limits = httpx.Limits(
            max_connections=settings.BACKEND_CLIENT_MAX_CONNECTIONS,
            max_keepalive_connections=settings.BACKEND_CLIENT_MAX_KEEPALIVE
        )

        _client = httpx.AsyncClient(
            base_url=settings.BACKEND_URL,
            timeout=settings.BACKEND_CLIENT_TIMEOUT,
            limits=limits,
            follow_redirects=False
        )
        logger.info(f"Initialized backend httpx.AsyncClient for {settings.BACKEND_URL}")

    return _client


async def aclose_client() -> None:
    """Close module-level httpx.AsyncClient gracefully."""
    global _client

    if _client is not None and not _client.is_closed:
        await _client.aclose()
        logger.info("Closed backend httpx.AsyncClient")
        _client = None


# ============================================================================
# Helpers
# ============================================================================


def _build_headers(prefer_representation: bool = False) -> Dict[str, str]:
    """Build request headers."""
    headers = {
        "Accept": "application/json",
    }

    api_key = settings.BACKEND_API_KEY
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"

    trace_id = get_trace_id()
    if trace_id != "-":
        headers["x-request-id"] = trace_id

    if prefer_representation:
        headers["Prefer"] = "return=representation"

    return headers


def _eq(value: Any) -> str:
    return f"eq.{value}"


def _in(values) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


async def _request(
    method: str,
    path: str,
    params: Optional[Dict[str, Any]] = None,
    json: Any = None,
    content: Optional[bytes] = None,
    extra_headers: Optional[Dict[str, str]] = None,
    prefer_representation: bool = False
) -> Any:
    """
    Send a request to the backend and decode the JSON body.

    Raises:
        AppError: Mapped from the backend status code
        ServiceUnavailableError: On connection problems or timeouts
    """
    headers = _build_headers(prefer_representation)
    if extra_headers:
        headers.update(extra_headers)

    try:
        client = get_client()
        response = await client.request(
            method,
            path,
            params=params,
            json=json,
            content=content,
            headers=headers
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning(f"Backend {method} {path} failed with {e.response.status_code}")
        raise from_http_exception(e)
    except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as e:
        logger.error(f"Backend connection error: {type(e).__name__}: {e}")
        raise ServiceUnavailableError(
            message="Booking backend is unreachable. Please try again shortly.",
            details={"reason": type(e).__name__}
        )

    if not response.content:
        return None
    return response.json()


async def _select(table: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = await _request("GET", f"{REST_PREFIX}/{table}", params=params)
    if not isinstance(rows, list):
        return []
    return [r for r in rows if isinstance(r, dict)]


async def _insert(table: str, row: Dict[str, Any]) -> Dict[str, Any]:
    rows = await _request(
        "POST",
        f"{REST_PREFIX}/{table}",
        json=row,
        prefer_representation=True
    )
    if not rows:
        raise InternalError(message=f"Backend did not return the inserted {table} row")
    return rows[0] if isinstance(rows, list) else rows


async def _update(table: str, filters: Dict[str, Any], fields: Dict[str, Any]) -> List[Dict[str, Any]]:
    rows = await _request(
        "PATCH",
        f"{REST_PREFIX}/{table}",
        params=filters,
        json=fields,
        prefer_representation=True
    )
    return rows if isinstance(rows, list) else []


# ============================================================================
# Row Normalization
# ============================================================================


def _normalize_center(row: Any) -> Dict[str, Any]:
    if not isinstance(row, dict):
        return {}

    return {
        "id": str(row.get("id") or ""),
        "center_name": str(row.get("center_name") or row.get("name") or ""),
        "address": str(row.get("address") or ""),
        "latitude": row.get("latitude"),
        "longitude": row.get("longitude"),
    }


def _normalize_slot(row: Any) -> Dict[str, Any]:
    if not isinstance(row, dict):
        return {}

    return {
        "id": str(row.get("id") or ""),
        "center_id": str(row.get("center_id") or ""),
        "date": str(row.get("date") or ""),
        "time": str(row.get("time") or ""),
        "capacity": row.get("capacity"),
        "booked_count": row.get("booked_count") or 0,
    }


def _normalize_user(row: Any) -> Dict[str, Any]:
    """Normalize a user row; keeps password hash and embedding for internal use."""
    if not isinstance(row, dict):
        return {}

    return {
        "id": str(row.get("id") or ""),
        "aadhaar_number": str(row.get("aadhaar_number") or ""),
        "name": str(row.get("name") or ""),
        "email": str(row.get("email") or ""),
        "mobile": str(row.get("mobile") or row.get("phone") or ""),
        "date_of_birth": row.get("date_of_birth") or row.get("dob"),
        "password_hash": row.get("password_hash"),
        "preferred_language": row.get("preferred_language") or "en",
        "face_image_url": row.get("face_image_url"),
        "face_descriptor": row.get("face_descriptor"),
        "address": row.get("address"),
        "role": row.get("role") or "citizen",
    }


def _normalize_booking(row: Any) -> Dict[str, Any]:
    """Normalize a booking row, flattening the embedded slot and center."""
    if not isinstance(row, dict):
        return {}

    slot = row.get("slots") if isinstance(row.get("slots"), dict) else {}
    center = slot.get("centers") if isinstance(slot.get("centers"), dict) else {}

    return {
        "id": str(row.get("id") or ""),
        "user_id": str(row.get("user_id") or ""),
        "slot_id": str(row.get("slot_id") or ""),
        "status": str(row.get("status") or "Booked"),
        "booking_type": str(row.get("booking_type") or "Normal"),
        "update_type": row.get("update_type"),
        "created_at": row.get("created_at"),
        "slot_date": slot.get("date"),
        "slot_time": slot.get("time"),
        "center_name": center.get("center_name"),
        "center_address": center.get("address"),
    }


def _normalize_update_request(row: Any) -> Dict[str, Any]:
    if not isinstance(row, dict):
        return {}

    return {
        "id": str(row.get("id") or ""),
        "user_id": str(row.get("user_id") or ""),
        "type": str(row.get("type") or ""),
        "new_value": str(row.get("new_value") or ""),
        "status": str(row.get("status") or "pending"),
        "created_at": row.get("created_at"),
    }


# ============================================================================
# Centers and Slots
# ============================================================================


async def get_centers() -> List[Dict[str, Any]]:
    """List all service centers."""
    rows = await _select("centers", {"select": "*", "order": "center_name.asc"})
    centers = [_normalize_center(r) for r in rows]
    return [c for c in centers if c.get("id")]


async def get_center(center_id: str) -> Optional[Dict[str, Any]]:
    """Get one center or None."""
    rows = await _select("centers", {"select": "*", "id": _eq(center_id), "limit": 1})
    return _normalize_center(rows[0]) if rows else None


async def get_slots(center_id: str, date: str) -> List[Dict[str, Any]]:
    """
    Get all slots of a center on a date, ordered by time.

    Args:
        center_id: Center identifier
        date: Date in YYYY-MM-DD format
    """
    rows = await _select("slots", {
        "select": "*",
        "center_id": _eq(center_id),
        "date": _eq(date),
        "order": "time.asc",
    })
    slots = [_normalize_slot(r) for r in rows]
    logger.info(f"Retrieved {len(slots)} slots for center {center_id} on {date}")
    return [s for s in slots if s.get("id")]


async def get_slot(slot_id: str) -> Optional[Dict[str, Any]]:
    """Get one slot or None."""
    rows = await _select("slots", {"select": "*", "id": _eq(slot_id), "limit": 1})
    return _normalize_slot(rows[0]) if rows else None


async def increment_slot_booked_count(slot: Dict[str, Any]) -> Dict[str, Any]:
    """
    Increment booked_count by one.

    The update only applies if booked_count is unchanged since the slot
    was read, so two concurrent bookings cannot both take the last seat.

    Raises:
        ConflictError: If the slot changed in the meantime
    """
    current = int(slot["booked_count"])
    rows = await _update(
        "slots",
        {"id": _eq(slot["id"]), "booked_count": _eq(current)},
        {"booked_count": current + 1}
    )
    if not rows:
        raise ConflictError(
            message="This slot was just updated by another booking. Please try again.",
            details={"slot_id": slot["id"]}
        )
    return _normalize_slot(rows[0])


# ============================================================================
# Users
# ============================================================================


async def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    """Get a user by id or None."""
    rows = await _select("users", {"select": "*", "id": _eq(user_id), "limit": 1})
    return _normalize_user(rows[0]) if rows else None


async def get_user_by_aadhaar(aadhaar_number: str) -> Optional[Dict[str, Any]]:
    """Get a user by Aadhaar number or None."""
    rows = await _select("users", {
        "select": "*",
        "aadhaar_number": _eq(aadhaar_number),
        "limit": 1,
    })
    return _normalize_user(rows[0]) if rows else None


async def insert_user(row: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert a user row.

    Raises:
        ConflictError: If the Aadhaar number or email is already registered
    """
    try:
        created = await _insert("users", row)
    except AppError as e:
        if e.status_code == 409:
            raise ConflictError(message="Email or Aadhaar already registered.")
        raise
    return _normalize_user(created)


async def update_user(user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Update fields of a user; returns the updated user or None."""
    rows = await _update("users", {"id": _eq(user_id)}, fields)
    return _normalize_user(rows[0]) if rows else None


async def upload_face_image(filename: str, data: bytes) -> str:
    """
    Upload a JPEG to the face bucket.

    Returns:
        Public URL of the stored object
    """
    bucket = settings.FACE_BUCKET
    await _request(
        "POST",
        f"{STORAGE_PREFIX}/{bucket}/{filename}",
        content=data,
        extra_headers={"Content-Type": "image/jpeg"}
    )
    return f"{settings.BACKEND_URL}{STORAGE_PREFIX}/public/{bucket}/{filename}"


# ============================================================================
# Bookings
# ============================================================================

BOOKING_SELECT = "*,slots(*,centers(*))"


async def find_active_booking(user_id: str, slot_id: str) -> Optional[Dict[str, Any]]:
    """Active (Booked/Confirmed) booking of a user for a slot, or None."""
    rows = await _select("bookings", {
        "select": "id,status",
        "user_id": _eq(user_id),
        "slot_id": _eq(slot_id),
        "status": _in(ACTIVE_BOOKING_STATUSES),
        "limit": 1,
    })
    return rows[0] if rows else None


async def insert_booking(row: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a booking row and return it normalized."""
    created = await _insert("bookings", row)
    return _normalize_booking(created)


async def list_bookings(user_id: str) -> List[Dict[str, Any]]:
    """Bookings of a user, newest first, with slot and center details."""
    rows = await _select("bookings", {
        "select": BOOKING_SELECT,
        "user_id": _eq(user_id),
        "order": "created_at.desc",
    })
    return [_normalize_booking(r) for r in rows]


async def get_booking(booking_id: str) -> Optional[Dict[str, Any]]:
    """Get one booking with slot and center details, or None."""
    rows = await _select("bookings", {
        "select": BOOKING_SELECT,
        "id": _eq(booking_id),
        "limit": 1,
    })
    return _normalize_booking(rows[0]) if rows else None


async def update_booking_status(booking_id: str, status: str) -> Optional[Dict[str, Any]]:
    """Set the status of a booking."""
    rows = await _update("bookings", {"id": _eq(booking_id)}, {"status": status})
    return _normalize_booking(rows[0]) if rows else None


# ============================================================================
# Update Requests
# ============================================================================


async def list_update_requests(user_id: str) -> List[Dict[str, Any]]:
    """Profile update requests of a user, newest first."""
    rows = await _select("update_requests", {
        "select": "*",
        "user_id": _eq(user_id),
        "order": "created_at.desc",
    })
    return [_normalize_update_request(r) for r in rows]


async def find_pending_update_request(user_id: str, request_type: str) -> Optional[Dict[str, Any]]:
    """Pending request of the given type, or None."""
    rows = await _select("update_requests", {
        "select": "id",
        "user_id": _eq(user_id),
        "type": _eq(request_type),
        "status": _eq("pending"),
        "limit": 1,
    })
    return rows[0] if rows else None


async def insert_update_request(row: Dict[str, Any]) -> Dict[str, Any]:
    """Insert an update request row and return it normalized."""
    created = await _insert("update_requests", row)
    return _normalize_update_request(created)
