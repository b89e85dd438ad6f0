from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from typing import Any, TypeVar

import httpx

from clinic_scheduler.application.exceptions import ClinicContractError, ClinicUpstreamError
from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.application.ports.request_service import RequestServicePort
from clinic_scheduler.core.config import settings
from clinic_scheduler.domain.entities.availability import SlotAvailability
from clinic_scheduler.domain.entities.booking import Booking, Session
from clinic_scheduler.domain.entities.booking_request import BookingRequest
from clinic_scheduler.domain.entities.edit_request import (
    Appointment,
    SessionEditProposal,
    SessionEditRequest,
)
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.domain.entities.request_status import RequestStatus
from clinic_scheduler.domain.entities.therapist import Therapist
from clinic_scheduler.infrastructure.catalog.slot_catalog_data import SLOT_CATALOG
from clinic_scheduler.infrastructure.clinic_api.payloads import (
    parse_appointment,
    parse_availability_range,
    parse_booking,
    parse_booking_request,
    parse_edit_request,
    parse_package,
    parse_therapist,
    session_payload,
)

T = TypeVar("T")


class ClinicApiClient(ClinicDataPort, RequestServicePort):
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CLINIC_API_BASE_URL or "").rstrip("/")
        self._token = token or settings.CLINIC_API_TOKEN
        self._client = httpx.Client(
            timeout=timeout or settings.CLINIC_API_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("CLINIC_API_BASE_URL is required for the clinic API client")

    # --- data service ---

    def fetch_therapists(self) -> list[Therapist]:
        data = self._request("GET", "/api/admin/therapists")
        return self._parse_list(data, "therapists", parse_therapist)

    def fetch_bookings(self, date_from: date | None = None, date_to: date | None = None) -> list[Booking]:
        params = {}
        if date_from:
            params["from"] = date_from.isoformat()
        if date_to:
            params["to"] = date_to.isoformat()
        data = self._request("GET", "/api/admin/bookings", params=params)
        return self._parse_list(data, "bookings", parse_booking)

    def fetch_packages(self) -> list[Package]:
        data = self._request("GET", "/api/admin/packages")
        return self._parse_list(data, "packages", parse_package)

    def fetch_availability_range(self, date_from: date, date_to: date) -> dict[date, dict[str, SlotAvailability]]:
        data = self._request(
            "GET",
            f"/api/admin/availability-slots/range/{date_from.isoformat()}/{date_to.isoformat()}",
        )
        return self._parse(lambda: parse_availability_range(data))

    def put_day_capacity(self, day: date, counts: dict[str, int]) -> None:
        sessions = [
            {
                "id": slot.id,
                "label": slot.label,
                "limited": slot.is_limited,
                "count": counts.get(slot.id, 0),
            }
            for slot in SLOT_CATALOG
        ]
        self._request("PUT", f"/api/admin/availability-slots/{day.isoformat()}", json={"sessions": sessions})

    def put_default_capacity(self, default_capacity: int) -> None:
        self._request(
            "PUT",
            "/api/admin/availability-slots/default-therapist-count",
            json={"defaultCapacity": default_capacity},
        )

    # --- request-lifecycle service ---

    def create_booking_request(
        self,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        payload = _booking_request_payload(patient_id, therapy_id, package_id, sessions, discount_info)
        data = self._request("POST", "/api/parent/create-booking-request", json=payload)
        return self._parse_booking_request(data)

    def update_booking_request(
        self,
        request_id: str,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        payload = _booking_request_payload(patient_id, therapy_id, package_id, sessions, discount_info)
        data = self._request("PUT", f"/api/parent/booking-request/{request_id}", json=payload)
        return self._parse_booking_request(data)

    def delete_booking_request(self, request_id: str) -> None:
        self._request("DELETE", f"/api/parent/booking-request/{request_id}")

    def get_booking_request(self, request_id: str) -> BookingRequest | None:
        data = self._request("GET", "/api/admin/bookings/booking-requests")
        for request in self._parse_list(data, "bookingRequests", parse_booking_request):
            if request.id == request_id:
                return request
        return None

    def decide_booking_request(self, request_id: str, status: RequestStatus) -> BookingRequest:
        action = _decision_action(status)
        data = self._request("POST", f"/api/admin/bookings/booking-requests/{request_id}/{action}")
        if isinstance(data, dict) and isinstance(data.get("bookingRequest"), dict):
            return self._parse_booking_request(data)
        request = self.get_booking_request(request_id)
        if request is None:
            raise ClinicContractError(f"Booking request {request_id} missing after {action}")
        return request

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        data = self._request("GET", "/api/parent/appointments")
        for appointment in self._parse_list(data, "data", parse_appointment):
            if appointment.id == appointment_id:
                return appointment
        return None

    def create_session_edit_request(
        self,
        appointment_id: str,
        patient_id: str | None,
        proposals: list[SessionEditProposal],
    ) -> SessionEditRequest:
        payload = {
            "appointmentId": appointment_id,
            "patientId": patient_id,
            "sessions": [
                {"sessionId": p.session_id, "newDate": p.new_date.isoformat(), "newSlotId": p.new_slot_id}
                for p in proposals
            ],
        }
        data = self._request("POST", "/api/parent/session-edit-request-bulk", json=payload)
        raw = data.get("editRequest") if isinstance(data, dict) else None
        if not isinstance(raw, dict):
            # Older backends only acknowledge the request; echo it back as pending.
            ack_id = data.get("id") if isinstance(data, dict) else None
            return SessionEditRequest(
                id=str(ack_id or ""),
                appointment_id=appointment_id,
                sessions=tuple(proposals),
            )
        return self._parse(lambda: parse_edit_request(raw))

    def decide_session_edit_request(self, request_id: str, status: RequestStatus) -> SessionEditRequest:
        action = _decision_action(status)
        data = self._request("POST", f"/api/admin/bookings/session-edit-requests/{request_id}/{action}")
        raw = data.get("editRequest") if isinstance(data, dict) else None
        if not isinstance(raw, dict):
            raise ClinicContractError(f"No edit request returned after {action}")
        return self._parse(lambda: parse_edit_request(raw))

    # --- helpers ---

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self._base_url}{path}"
        headers = {"Authorization": self._token} if self._token else {}
        try:
            response = self._client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            self._logger.error("Clinic API unreachable", extra={"path": path, "error": str(e)})
            raise ClinicUpstreamError(f"Clinic API unreachable: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            self._logger.error(
                "Clinic API request failed",
                extra={"path": path, "status": response.status_code, "error": message},
            )
            raise ClinicUpstreamError(message)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise ClinicContractError(f"Clinic API returned invalid JSON for {path}") from e
        if isinstance(data, dict) and data.get("success") is False:
            raise ClinicUpstreamError(str(data.get("message") or data.get("error") or "Request failed."))
        return data

    def _parse(self, parse: Callable[[], T]) -> T:
        try:
            return parse()
        except ClinicContractError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ClinicContractError(f"Unexpected clinic API payload: {e}") from e

    def _parse_list(self, data: Any, key: str, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        items = data.get(key) if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ClinicContractError(f"Clinic API response has no '{key}' list")
        return self._parse(lambda: [parse(item) for item in items if isinstance(item, dict)])

    def _parse_booking_request(self, data: Any) -> BookingRequest:
        raw = data.get("bookingRequest") if isinstance(data, dict) else None
        if not isinstance(raw, dict):
            raise ClinicContractError("No booking request returned from server.")
        return self._parse(lambda: parse_booking_request(raw))


def _booking_request_payload(
    patient_id: str,
    therapy_id: str,
    package_id: str,
    sessions: list[Session],
    discount_info: dict[str, Any] | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "patient": patient_id,
        "therapy": therapy_id,
        "package": package_id,
        "sessions": session_payload(sessions),
    }
    if discount_info:
        payload.update(discount_info)
    return payload


def _decision_action(status: RequestStatus) -> str:
    if status is RequestStatus.APPROVED:
        return "approve"
    if status is RequestStatus.REJECTED:
        return "reject"
    raise ValueError(f"Not a decision: {status.value}")


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and (body.get("message") or body.get("error")):
        return str(body.get("message") or body.get("error"))
    text = response.text.strip()
    if text and not text.startswith("<"):
        return text
    return f"Clinic API returned HTTP {response.status_code}"
