from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any

from clinic_scheduler.application.exceptions import ClinicUpstreamError
from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.application.ports.request_service import RequestServicePort
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


class MockClinicService(ClinicDataPort, RequestServicePort):
    """In-memory clinic backend for local runs and tests."""

    def __init__(
        self,
        therapists: list[Therapist] | None = None,
        bookings: list[Booking] | None = None,
        packages: list[Package] | None = None,
        appointments: list[Appointment] | None = None,
    ) -> None:
        self.therapists = list(therapists or [])
        self.bookings = list(bookings or [])
        self.packages = list(packages or [])
        self.appointments: dict[str, Appointment] = {a.id: a for a in appointments or []}
        self.booking_requests: dict[str, BookingRequest] = {}
        self.edit_requests: dict[str, SessionEditRequest] = {}
        self.capacity: dict[date, dict[str, int]] = {}
        self.default_capacity = 0
        self.fail_writes = False
        self._counter = 0
        self._logger = logging.getLogger(__name__)

    def _next_id(self, prefix: str) -> str:
        self._counter += 1
        return f"mock_{prefix}_{self._counter}"

    def _check_write(self) -> None:
        if self.fail_writes:
            raise ClinicUpstreamError("Mock clinic backend is failing writes")

    def fetch_therapists(self) -> list[Therapist]:
        return list(self.therapists)

    def fetch_bookings(self, date_from: date | None = None, date_to: date | None = None) -> list[Booking]:
        return list(self.bookings)

    def fetch_packages(self) -> list[Package]:
        return list(self.packages)

    def fetch_availability_range(self, date_from: date, date_to: date) -> dict[date, dict[str, SlotAvailability]]:
        booked = self._booked_counts()
        return {
            day: {
                slot_id: SlotAvailability(count=count, booked=booked.get((day, slot_id), 0))
                for slot_id, count in counts.items()
            }
            for day, counts in self.capacity.items()
            if date_from <= day <= date_to
        }

    def put_day_capacity(self, day: date, counts: dict[str, int]) -> None:
        self._check_write()
        self.capacity[day] = dict(counts)

    def put_default_capacity(self, default_capacity: int) -> None:
        self._check_write()
        self.default_capacity = default_capacity

    def create_booking_request(
        self,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        self._check_write()
        request = BookingRequest(
            id=self._next_id("request"),
            patient_id=patient_id,
            therapy_id=therapy_id,
            package_id=package_id,
            sessions=tuple(sessions),
            discount_info=discount_info,
        )
        self.booking_requests[request.id] = request
        self._logger.info("Mock booking request created", extra={"request_id": request.id})
        return request

    def update_booking_request(
        self,
        request_id: str,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        self._check_write()
        current = self._booking_request(request_id)
        updated = replace(
            current,
            patient_id=patient_id,
            therapy_id=therapy_id,
            package_id=package_id,
            sessions=tuple(sessions),
            discount_info=discount_info,
        )
        self.booking_requests[request_id] = updated
        return updated

    def delete_booking_request(self, request_id: str) -> None:
        self._check_write()
        self._booking_request(request_id)
        del self.booking_requests[request_id]

    def get_booking_request(self, request_id: str) -> BookingRequest | None:
        return self.booking_requests.get(request_id)

    def decide_booking_request(self, request_id: str, status: RequestStatus) -> BookingRequest:
        self._check_write()
        decided = replace(self._booking_request(request_id), status=status)
        self.booking_requests[request_id] = decided
        return decided

    def get_appointment(self, appointment_id: str) -> Appointment | None:
        return self.appointments.get(appointment_id)

    def create_session_edit_request(
        self,
        appointment_id: str,
        patient_id: str | None,
        proposals: list[SessionEditProposal],
    ) -> SessionEditRequest:
        self._check_write()
        request = SessionEditRequest(
            id=self._next_id("edit"),
            appointment_id=appointment_id,
            sessions=tuple(proposals),
        )
        self.edit_requests[request.id] = request
        self._attach(request)
        return request

    def decide_session_edit_request(self, request_id: str, status: RequestStatus) -> SessionEditRequest:
        self._check_write()
        current = self.edit_requests.get(request_id)
        if current is None:
            raise ClinicUpstreamError(f"Edit request {request_id} not found")
        decided = replace(current, status=status)
        self.edit_requests[request_id] = decided
        self._attach(decided)
        return decided

    def _attach(self, request: SessionEditRequest) -> None:
        appointment = self.appointments.get(request.appointment_id)
        if appointment is None:
            return
        history = list(appointment.edit_requests)
        ids = [er.id for er in history]
        if request.id in ids:
            history[ids.index(request.id)] = request
        else:
            history.append(request)
        self.appointments[appointment.id] = replace(appointment, edit_requests=tuple(history))

    def _booking_request(self, request_id: str) -> BookingRequest:
        request = self.booking_requests.get(request_id)
        if request is None:
            raise ClinicUpstreamError(f"Booking request {request_id} not found")
        return request

    def _booked_counts(self) -> dict[tuple[date, str], int]:
        booked: dict[tuple[date, str], set[str]] = {}
        for booking in self.bookings:
            for session in booking.sessions:
                booked.setdefault((session.date, session.slot_id), set()).add(booking.therapist_id)
        return {key: len(therapists) for key, therapists in booked.items()}
