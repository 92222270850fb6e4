"""
API Tests

Tests for FastAPI endpoints using TestClient.
Backend client functions are replaced with in-memory fakes via monkeypatch.

Run: pytest tests/test_api.py -v
"""

import json

import pytest
from typing import Dict, Any, List


def vector(first=0.0, length=128):
    return [first] + [0.0] * (length - 1)


USER = {
    "id": "user-1",
    "aadhaar_number": "123412341234",
    "name": "Asha Rao",
    "email": "asha@example.com",
    "mobile": "9876543210",
    "date_of_birth": "1990-01-01",
    "password_hash": None,
    "preferred_language": "en",
    "face_image_url": None,
    "face_descriptor": vector(0.0),
    "address": "1 Temple Road",
    "role": "citizen",
}

CENTER = {"id": "center-1", "center_name": "Main Center", "address": "MG Road", "latitude": None, "longitude": None}


def slot_row(slot_id, time, capacity=10, booked_count=0):
    return {
        "id": slot_id,
        "center_id": "center-1",
        "date": "2026-10-20",
        "time": time,
        "capacity": capacity,
        "booked_count": booked_count,
    }


# ==================== Fixtures ====================

@pytest.fixture
def client():
    """Create FastAPI TestClient."""
    from fastapi.testclient import TestClient
    from app.main import app
    return TestClient(app)


@pytest.fixture
def backend(monkeypatch):
    """
    Replace backend_client functions with async fakes.

    Returns a dict of fake data and recorded calls that tests can adjust.
    """
    from app.tools import backend_client

    state: Dict[str, Any] = {
        "users": {USER["id"]: dict(USER)},
        "centers": [dict(CENTER)],
        "slots": {},
        "bookings": [],
        "update_requests": [],
        "calls": [],
    }

    async def get_centers():
        return state["centers"]

    async def get_center(center_id):
        return next((c for c in state["centers"] if c["id"] == center_id), None)

    async def get_slots(center_id, date):
        return [s for s in state["slots"].values() if s["center_id"] == center_id and s["date"] == date]

    async def get_slot(slot_id):
        return state["slots"].get(slot_id)

    async def increment_slot_booked_count(slot):
        state["calls"].append(("increment", slot["id"]))
        stored = state["slots"][slot["id"]]
        stored["booked_count"] += 1
        return stored

    async def get_user(user_id):
        return state["users"].get(user_id)

    async def get_user_by_aadhaar(aadhaar_number):
        return next((u for u in state["users"].values() if u["aadhaar_number"] == aadhaar_number), None)

    async def insert_user(row):
        user = {**USER, **row, "id": f"user-{len(state['users']) + 1}"}
        state["users"][user["id"]] = user
        return user

    async def update_user(user_id, fields):
        state["calls"].append(("update_user", user_id, fields))
        state["users"][user_id].update(fields)
        return state["users"][user_id]

    async def upload_face_image(filename, data):
        state["calls"].append(("upload", filename))
        return f"http://backend.test/storage/v1/object/public/faces/{filename}"

    async def find_active_booking(user_id, slot_id):
        return next(
            (b for b in state["bookings"]
             if b["user_id"] == user_id and b["slot_id"] == slot_id and b["status"] in ("Booked", "Confirmed")),
            None
        )

    async def insert_booking(row):
        state["calls"].append(("insert_booking", row))
        booking = {**row, "id": f"booking-{len(state['bookings']) + 1}"}
        state["bookings"].append(booking)
        return booking

    async def list_bookings(user_id):
        return [b for b in state["bookings"] if b["user_id"] == user_id]

    async def get_booking(booking_id):
        return next((b for b in state["bookings"] if b["id"] == booking_id), None)

    async def update_booking_status(booking_id, status):
        booking = next(b for b in state["bookings"] if b["id"] == booking_id)
        booking["status"] = status
        return booking

    async def list_update_requests(user_id):
        return [r for r in state["update_requests"] if r["user_id"] == user_id]

    async def find_pending_update_request(user_id, request_type):
        return next(
            (r for r in state["update_requests"]
             if r["user_id"] == user_id and r["type"] == request_type and r["status"] == "pending"),
            None
        )

    async def insert_update_request(row):
        request = {**row, "id": f"request-{len(state['update_requests']) + 1}"}
        state["update_requests"].append(request)
        return request

    fakes = (
        get_centers, get_center, get_slots, get_slot, increment_slot_booked_count,
        get_user, get_user_by_aadhaar, insert_user, update_user, upload_face_image,
        find_active_booking, insert_booking, list_bookings, get_booking, update_booking_status,
        list_update_requests, find_pending_update_request, insert_update_request,
    )
    for fake in fakes:
        monkeypatch.setattr(backend_client, fake.__name__, fake)

    return state


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    from app.core.security import create_session, encode_session
    return {"Authorization": f"Bearer {encode_session(create_session(USER))}"}


def error_code(response) -> str:
    return response.json()["detail"]["code"]


# ==================== Health and Root Endpoints ====================

def test_root_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health_endpoint(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"x-request-id": "trace-abc"})

    assert response.headers["x-request-id"] == "trace-abc"


# ==================== Chat API Tests ====================

def test_chat_endpoint(client):
    response = client.post("/api/chat", json={"message": "How do I book a slot?"})

    assert response.status_code == 200
    data = response.json()
    assert data["topic"] == "booking"
    assert "book a slot" in data["message"]


def test_chat_endpoint_requires_message(client):
    response = client.post("/api/chat", json={"language": "en"})

    assert response.status_code == 422


# ==================== Slots API Tests ====================

def test_list_centers(client, backend):
    response = client.get("/api/centers")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_count"] == 1
    assert data["centers"][0]["center_name"] == "Main Center"


def test_list_dates(client):
    response = client.get("/api/slots/dates")

    assert response.status_code == 200
    assert len(response.json()["data"]["dates"]) == 7


def test_list_slots_recommends_best(client, backend):
    backend["slots"] = {
        "s1": slot_row("s1", "12:00", booked_count=9),
        "s2": slot_row("s2", "10:00", booked_count=2),
        "s3": slot_row("s3", "15:00", booked_count=10),
        "bad": slot_row("bad", "16:00", capacity=2, booked_count=5),
    }

    response = client.get("/api/slots", params={"center_id": "center-1", "date": "2026-10-20"})

    assert response.status_code == 200
    body = response.json()
    data = body["data"]

    assert [s["id"] for s in data["slots"]] == ["s2", "s1"]
    assert data["recommended"]["id"] == "s2"
    assert data["recommended"]["display_time"] == "10:00 AM"
    assert data["recommended"]["score"] == pytest.approx(88.0)
    assert [s["is_recommended"] for s in data["slots"]] == [True, False]
    assert data["display_date"] == "Tue, 20 Oct 2026"
    assert body["proofs"]["algorithm"] == "availability_off_peak_weighted"


def test_list_slots_unknown_center(client, backend):
    response = client.get("/api/slots", params={"center_id": "nope", "date": "2026-10-20"})

    assert response.status_code == 404
    assert error_code(response) == "not_found"


def test_list_slots_bad_date(client, backend):
    response = client.get("/api/slots", params={"center_id": "center-1", "date": "20-10-2026"})

    assert response.status_code == 400
    assert error_code(response) == "validation_error"


# ==================== Auth API Tests ====================

def register_body(**overrides) -> Dict[str, Any]:
    body = {
        "aadhaar_number": "999988887777",
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "mobile": "9123456789",
        "date_of_birth": "1985-05-05",
        "password": "strong-pass",
        "preferred_language": "te",
        "face_embedding": vector(0.2),
    }
    body.update(overrides)
    return body


def test_register_success(client, backend):
    response = client.post("/api/auth/register", json=register_body(face_image_base64="data:image/jpeg;base64,/9j/4A=="))

    assert response.status_code == 201
    user = response.json()["data"]["user"]
    assert user["has_face_registered"] is True
    assert user["preferred_language"] == "te"
    assert "password_hash" not in user
    assert "face_descriptor" not in user
    assert user["face_image_url"].endswith(".jpg")


def test_register_duplicate_aadhaar(client, backend):
    response = client.post("/api/auth/register", json=register_body(aadhaar_number=USER["aadhaar_number"]))

    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "Aadhaar number already registered."


def test_register_requires_full_embedding(client, backend):
    response = client.post("/api/auth/register", json=register_body(face_embedding=[0.1] * 10))

    assert response.status_code == 422


def test_login_and_me(client, backend):
    from app.core.security import hash_password

    backend["users"]["user-1"]["password_hash"] = hash_password("strong-pass")

    response = client.post("/api/auth/login", json={"aadhaar_number": USER["aadhaar_number"], "password": "strong-pass"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user"]["id"] == "user-1"
    assert any(call[0] == "update_user" for call in backend["calls"])

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["data"]["user"]["name"] == "Asha Rao"


def test_login_wrong_password(client, backend):
    from app.core.security import hash_password

    backend["users"]["user-1"]["password_hash"] = hash_password("strong-pass")

    response = client.post("/api/auth/login", json={"aadhaar_number": USER["aadhaar_number"], "password": "nope"})

    assert response.status_code == 401
    assert response.json()["detail"]["message"] == "Invalid Aadhaar number or password."


def test_update_language(client, backend, auth_headers):
    response = client.put("/api/auth/language", json={"preferred_language": "hi"}, headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["user"]["preferred_language"] == "hi"


def test_me_requires_session(client, backend):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert error_code(response) == "unauthorized"


# ==================== Bookings API Tests ====================

def booking_body(live: List[List[float]], slot_id: str = "s1") -> Dict[str, Any]:
    return {"slot_id": slot_id, "update_type": "biometric", "live_embeddings": live}


def test_create_booking_success(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00", booked_count=3)}

    response = client.post("/api/bookings", json=booking_body([vector(0.1), vector(0.2)]), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["booking"]["status"] == "Booked"
    assert data["booking"]["booking_type"] == "Normal"
    assert data["booking"]["step_index"] == 0
    assert data["verification"]["matched"] is True
    assert data["verification"]["frames_used"] == 2
    assert backend["slots"]["s1"]["booked_count"] == 4


def test_create_booking_face_mismatch(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    response = client.post("/api/bookings", json=booking_body([vector(0.6)]), headers=auth_headers)

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["code"] == "face_mismatch"
    assert detail["details"]["confidence"] == 40
    assert backend["calls"] == []
    assert backend["bookings"] == []


def test_create_booking_full_slot(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00", capacity=5, booked_count=5)}

    response = client.post("/api/bookings", json=booking_body([vector(0.1)]), headers=auth_headers)

    assert response.status_code == 409
    assert response.json()["detail"]["message"] == "This slot is fully booked."
    assert backend["bookings"] == []


def test_create_booking_twice(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    first = client.post("/api/bookings", json=booking_body([vector(0.1)]), headers=auth_headers)
    second = client.post("/api/bookings", json=booking_body([vector(0.1)]), headers=auth_headers)

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"]["message"] == "You have already booked this slot."


def test_create_booking_unknown_slot(client, backend, auth_headers):
    response = client.post("/api/bookings", json=booking_body([vector(0.1)], slot_id="missing"), headers=auth_headers)

    assert response.status_code == 404


def test_create_booking_without_registered_face(client, backend, auth_headers):
    backend["users"]["user-1"]["face_descriptor"] = None
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    response = client.post("/api/bookings", json=booking_body([vector(0.1)]), headers=auth_headers)

    assert response.status_code == 409
    assert error_code(response) == "invalid_reference_embedding"


def test_create_booking_no_valid_capture(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    response = client.post("/api/bookings", json=booking_body([[0.1] * 64]), headers=auth_headers)

    assert response.status_code == 422
    assert error_code(response) == "no_valid_live_capture"


def test_create_booking_age_milestone(client, backend, auth_headers):
    from datetime import date, timedelta

    soon = date.today() + timedelta(days=20)
    backend["users"]["user-1"]["date_of_birth"] = f"{soon.year - 15}-{soon.month:02d}-{min(soon.day, 28):02d}"
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    response = client.post("/api/bookings", json=booking_body([vector(0.1)]), headers=auth_headers)

    assert response.status_code == 201
    assert response.json()["data"]["booking"]["booking_type"] == "Age Milestone"


def test_verify_face_reports_mismatch_without_error(client, backend, auth_headers):
    response = client.post("/api/bookings/verify-face", json={"live_embeddings": [vector(0.5)]}, headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["matched"] is False
    assert data["threshold"] == pytest.approx(0.45)


def test_bookings_require_session(client, backend):
    response = client.post("/api/bookings", json=booking_body([vector(0.1)]))

    assert response.status_code == 401


def test_list_bookings_tracking(client, backend, auth_headers):
    backend["bookings"] = [
        {"id": "b1", "user_id": "user-1", "slot_id": "s1", "status": "Confirmed"},
        {"id": "b2", "user_id": "user-1", "slot_id": "s2", "status": "Cancelled"},
        {"id": "b3", "user_id": "other", "slot_id": "s3", "status": "Booked"},
    ]

    response = client.get("/api/bookings", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total_count"] == 2
    assert data["active"][0]["step_index"] == 1
    assert data["active"][0]["can_cancel"] is True
    assert data["cancelled"][0]["step_index"] == -1
    assert data["cancelled"][0]["can_cancel"] is False


def test_cancel_booking(client, backend, auth_headers):
    backend["bookings"] = [{"id": "b1", "user_id": "user-1", "slot_id": "s1", "status": "Booked"}]

    response = client.post("/api/bookings/b1/cancel", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["data"]["booking"]["is_cancelled"] is True
    assert backend["bookings"][0]["status"] == "Cancelled"


def test_cancel_completed_booking_rejected(client, backend, auth_headers):
    backend["bookings"] = [{"id": "b1", "user_id": "user-1", "slot_id": "s1", "status": "Completed"}]

    response = client.post("/api/bookings/b1/cancel", headers=auth_headers)

    assert response.status_code == 409


def test_cancel_other_users_booking(client, backend, auth_headers):
    backend["bookings"] = [{"id": "b1", "user_id": "other", "slot_id": "s1", "status": "Booked"}]

    response = client.post("/api/bookings/b1/cancel", headers=auth_headers)

    assert response.status_code == 404
    assert backend["bookings"][0]["status"] == "Booked"


# ==================== Profile Update API Tests ====================

def update_body(live: List[List[float]], request_type: str = "mobile", new_value: str = "9000000000") -> Dict[str, Any]:
    return {"type": request_type, "new_value": new_value, "live_embeddings": live}


def test_update_request_success(client, backend, auth_headers):
    response = client.post("/api/profile/update-requests", json=update_body([vector(0.47)]), headers=auth_headers)

    assert response.status_code == 201
    request = response.json()["data"]["request"]
    assert request["status"] == "pending"
    assert request["stage_index"] == 0
    assert request["stage_labels"][0] == "Request Submitted"


def test_update_request_face_mismatch(client, backend, auth_headers):
    response = client.post("/api/profile/update-requests", json=update_body([vector(0.5)]), headers=auth_headers)

    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Face verification failed. Request denied."
    assert backend["update_requests"] == []


def test_update_request_same_value(client, backend, auth_headers):
    response = client.post(
        "/api/profile/update-requests",
        json=update_body([vector(0.1)], request_type="email", new_value="asha@example.com"),
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "New value cannot be same as existing value"


def test_update_request_blank_value(client, backend, auth_headers):
    response = client.post(
        "/api/profile/update-requests",
        json=update_body([vector(0.1)], new_value="   "),
        headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Please enter a new value"


def test_update_request_pending_duplicate(client, backend, auth_headers):
    backend["update_requests"] = [
        {"id": "r1", "user_id": "user-1", "type": "mobile", "new_value": "9111111111", "status": "pending"},
    ]

    response = client.post("/api/profile/update-requests", json=update_body([vector(0.1)]), headers=auth_headers)

    assert response.status_code == 409


def test_list_update_requests_stages(client, backend, auth_headers):
    backend["update_requests"] = [
        {"id": "r1", "user_id": "user-1", "type": "mobile", "new_value": "9111111111", "status": "vro_verified"},
        {"id": "r2", "user_id": "user-1", "type": "email", "new_value": "a@b.co", "status": "rejected"},
        {"id": "r3", "user_id": "user-1", "type": "address", "new_value": "2 Lake View", "status": "approved"},
    ]

    response = client.get("/api/profile/update-requests", headers=auth_headers)

    assert response.status_code == 200
    requests = {r["id"]: r for r in response.json()["data"]["requests"]}
    assert requests["r1"]["stage_index"] == 2
    assert requests["r2"]["is_rejected"] is True
    assert requests["r3"]["stage_index"] == 3


# ==================== Non-finite Embedding Tests ====================

def post_raw(client, url, body, headers):
    """Post a body the way a browser might, with NaN/Infinity literals kept."""
    return client.post(url, content=json.dumps(body), headers={**headers, "Content-Type": "application/json"})


def test_verify_face_rejects_nan_embedding(client, backend, auth_headers):
    response = post_raw(client, "/api/bookings/verify-face", {"live_embeddings": [vector(float("nan"))]}, auth_headers)

    assert response.status_code == 422
    errors = response.json()["detail"]
    assert errors[0]["loc"][:2] == ["body", "live_embeddings"]
    assert all("input" not in error for error in errors)


def test_create_booking_rejects_infinite_embedding(client, backend, auth_headers):
    backend["slots"] = {"s1": slot_row("s1", "10:00")}

    response = post_raw(client, "/api/bookings", booking_body([vector(float("inf"))]), auth_headers)

    assert response.status_code == 422
    assert backend["bookings"] == []
    assert backend["slots"]["s1"]["booked_count"] == 0


def test_update_request_rejects_nan_embedding(client, backend, auth_headers):
    response = post_raw(client, "/api/profile/update-requests", update_body([vector(float("nan"))]), auth_headers)

    assert response.status_code == 422
    assert backend["update_requests"] == []


def test_register_rejects_nan_embedding(client, backend):
    response = post_raw(client, "/api/auth/register", register_body(face_embedding=vector(float("nan"))), {})

    assert response.status_code == 422


def test_stored_nan_reference_is_conflict(client, backend, auth_headers):
    backend["users"]["user-1"]["face_descriptor"] = json.dumps(vector(float("nan")))

    response = client.post("/api/bookings/verify-face", json={"live_embeddings": [vector(0.1)]}, headers=auth_headers)

    assert response.status_code == 409
    assert error_code(response) == "invalid_reference_embedding"
