"""
Tests for the HTTP API, run against the in-memory clinic backend.
"""

from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from clinic_scheduler.application.use_cases.availability_board import AvailabilityBoard
from clinic_scheduler.application.use_cases.booking_requests import MISSING_FIELDS_MESSAGE, BookingRequestLifecycle
from clinic_scheduler.application.use_cases.edit_lock import EditLockPolicy
from clinic_scheduler.application.use_cases.session_edit_requests import SessionEditRequestLifecycle
from clinic_scheduler.application.use_cases.snapshot import SnapshotLoader
from clinic_scheduler.domain.entities.booking import Booking, Session
from clinic_scheduler.domain.entities.edit_request import Appointment
from clinic_scheduler.domain.entities.holiday import FullDayHoliday
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.domain.entities.therapist import Therapist
from clinic_scheduler.infrastructure.catalog.slot_catalog_store import SlotCatalogStore
from clinic_scheduler.infrastructure.clinic_api.mock_clinic import MockClinicService
from clinic_scheduler.main import app
from clinic_scheduler.wiring import dependencies

IST = ZoneInfo("Asia/Kolkata")
NOW = datetime(2024, 6, 3, 9, 0, tzinfo=IST)
MONDAY = date(2024, 6, 3)
SLOT = "1000-1045"


@pytest.fixture
def service():
    return MockClinicService(
        therapists=[
            Therapist(id="t1", holidays=(FullDayHoliday(date=MONDAY),)),
            Therapist(id="t2"),
            Therapist(id="t3"),
        ],
        bookings=[
            Booking(id="b2", therapist_id="t2", sessions=(Session(date=MONDAY, slot_id=SLOT),)),
            Booking(id="b3", therapist_id="t3", sessions=(Session(date=MONDAY, slot_id=SLOT),)),
        ],
        packages=[Package(id="pkg1", total_session_count=4, name="4 Sessions")],
        appointments=[
            Appointment(
                id="a1",
                patient_id="p1",
                sessions=(Session(date=date(2024, 6, 10), slot_id=SLOT, id="s1"),),
            )
        ],
    )


@pytest.fixture
def client(service):
    catalog = SlotCatalogStore()
    policy = EditLockPolicy(catalog, IST)
    board = AvailabilityBoard(service, catalog)

    app.dependency_overrides[dependencies.get_clinic_data] = lambda: service
    app.dependency_overrides[dependencies.get_request_service] = lambda: service
    app.dependency_overrides[dependencies.get_snapshot_loader] = lambda: SnapshotLoader(service)
    app.dependency_overrides[dependencies.get_now] = lambda: NOW
    app.dependency_overrides[dependencies.get_booking_lifecycle] = lambda: BookingRequestLifecycle(service, catalog)
    app.dependency_overrides[dependencies.get_session_edit_lifecycle] = lambda: SessionEditRequestLifecycle(
        service, catalog, policy
    )
    app.dependency_overrides[dependencies.get_availability_board] = lambda: board
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_request(client: TestClient) -> dict:
    response = client.post(
        "/api/v1/booking-requests",
        json={
            "patient_id": "p1",
            "therapy_id": "th1",
            "package_id": "pkg1",
            "sessions": [{"date": "2024-06-10", "slot_id": SLOT}],
        },
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_list_slots(client):
    slots = client.get("/api/v1/slots").json()

    assert len(slots) == 15
    assert slots[0] == {"id": "0830-0915", "label": "08:30 to 09:15", "is_limited": True}


def test_day_availability_marks_full_slot(client):
    """Test that the full slot is disabled unless it is the session's current slot."""
    options = client.get(f"/api/v1/availability/{MONDAY.isoformat()}").json()["options"]
    full = next(o for o in options if o["slot_id"] == SLOT)

    assert full["disabled"] is True
    assert full["available_therapists"] == 2
    assert full["booked_therapists"] == 2

    options = client.get(f"/api/v1/availability/{MONDAY.isoformat()}", params={"current_slot_id": SLOT}).json()["options"]
    assert next(o for o in options if o["slot_id"] == SLOT)["disabled"] is False


def test_day_availability_rejects_unknown_current_slot(client):
    response = client.get(f"/api/v1/availability/{MONDAY.isoformat()}", params={"current_slot_id": "bogus"})

    assert response.status_code == 400


def test_weekly_projection_reports_conflict(client):
    response = client.post(
        "/api/v1/availability/weekly-projection",
        json={"start_date": "2024-06-01", "weekday": 1, "slot_id": SLOT, "session_count": 2},
    )

    body = response.json()
    assert response.status_code == 200
    assert body["dates"] == ["2024-06-10"]
    assert body["conflicts"] == {"2024-06-03": "2024-06-03 at 10:00 to 10:45: All slots are filled for this time"}


def test_weekly_projection_missing_inputs_is_400(client):
    response = client.post("/api/v1/availability/weekly-projection", json={"session_count": 2})

    assert response.status_code == 400


def test_edit_lock_check(client):
    response = client.post("/api/v1/edit-lock/check", json={"date": "2024-06-03", "slot_id": SLOT})

    assert response.json()["locked"] is True

    response = client.post(
        "/api/v1/edit-lock/check",
        json={"date": "2024-06-10", "slot_id": SLOT, "now": "2024-06-03T07:30:00"},
    )
    assert response.json() == {"locked": False, "reason": ""}


def test_create_booking_request_validation_error(client):
    response = client.post("/api/v1/booking-requests", json={"sessions": []})

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == MISSING_FIELDS_MESSAGE
    assert "package_id" in response.json()["detail"]["errors"]


def test_booking_request_lifecycle(client):
    """Test that an approved request can no longer be edited (409)."""
    created = _create_request(client)
    assert created["status"] == "pending"

    approved = client.post(f"/api/v1/booking-requests/{created['id']}/approve")
    assert approved.json()["status"] == "approved"

    response = client.put(
        f"/api/v1/booking-requests/{created['id']}",
        json={"package_id": "pkg1", "sessions": [{"date": "2024-06-11", "slot_id": SLOT}]},
    )
    assert response.status_code == 409


def test_delete_pending_booking_request(client, service):
    created = _create_request(client)

    assert client.delete(f"/api/v1/booking-requests/{created['id']}").status_code == 204
    assert service.booking_requests == {}
    assert client.delete(f"/api/v1/booking-requests/{created['id']}").status_code == 404


def test_submit_edit_request_and_list_pending(client):
    response = client.post(
        "/api/v1/appointments/a1/edit-requests",
        json={"sessions": [{"session_id": "s1", "new_date": "2024-06-11", "new_slot_id": "1415-1500"}]},
    )
    assert response.status_code == 201
    request_id = response.json()["id"]

    pending = client.get("/api/v1/appointments/a1/pending-edits").json()
    assert pending == [
        {
            "session_id": "s1",
            "request_id": request_id,
            "status": "pending",
            "new_date": "2024-06-11",
            "new_slot_id": "1415-1500",
        }
    ]

    rejected = client.post(f"/api/v1/appointments/a1/edit-requests/{request_id}/reject")
    assert rejected.json()["status"] == "rejected"
    assert client.get("/api/v1/appointments/a1/pending-edits").json() == []


def test_unknown_appointment_is_404(client):
    assert client.get("/api/v1/appointments/missing/pending-edits").status_code == 404


def test_capacity_increment_and_upstream_failure(client, service):
    response = client.post(f"/api/v1/capacity/{MONDAY.isoformat()}/{SLOT}/increment")
    slots = {s["slot_id"]: s for s in response.json()["slots"]}
    assert slots[SLOT]["count"] == 1

    service.fail_writes = True
    response = client.post(f"/api/v1/capacity/{MONDAY.isoformat()}/{SLOT}/increment")
    assert response.status_code == 502

    service.fail_writes = False
    slots = {s["slot_id"]: s for s in client.get(f"/api/v1/capacity/{MONDAY.isoformat()}").json()["slots"]}
    assert slots[SLOT]["count"] == 1


def test_set_all_rejects_negative_count(client):
    response = client.put(f"/api/v1/capacity/{MONDAY.isoformat()}", json={"count": -1})

    assert response.status_code == 400


def test_apply_default_count_uses_today(client, service):
    response = client.put("/api/v1/capacity/default", json={"count": 2})

    assert response.status_code == 200
    assert len(response.json()) == 14
    assert MONDAY not in service.capacity
    assert service.default_capacity == 2


def test_month_capacity(client, service):
    service.capacity[date(2024, 5, 31)] = {SLOT: 1}

    days = client.get("/api/v1/capacity/month/2024/6").json()

    assert [d["date"] for d in days] == ["2024-05-31"]
    assert client.get("/api/v1/capacity/month/2024/13").status_code == 400


def test_booking_request_into_full_slot_is_400(client, service):
    response = client.post(
        "/api/v1/booking-requests",
        json={
            "patient_id": "p1",
            "therapy_id": "th1",
            "package_id": "pkg1",
            "sessions": [{"date": MONDAY.isoformat(), "slot_id": SLOT}],
        },
    )

    assert response.status_code == 400
    assert response.json()["detail"]["errors"] == {
        "sessions[0]": "2024-06-03 at 10:00 to 10:45: All slots are filled for this time"
    }
    assert service.booking_requests == {}


def test_edit_request_into_full_slot_is_400(client, service):
    full_day = date(2024, 6, 12)
    service.bookings.extend(
        Booking(id=f"x{t}", therapist_id=t, sessions=(Session(date=full_day, slot_id=SLOT),)) for t in ("t1", "t2", "t3")
    )

    response = client.post(
        "/api/v1/appointments/a1/edit-requests",
        json={"sessions": [{"session_id": "s1", "new_date": full_day.isoformat(), "new_slot_id": SLOT}]},
    )

    assert response.status_code == 400
    assert "s1" in response.json()["detail"]["errors"]
    assert service.edit_requests == {}
