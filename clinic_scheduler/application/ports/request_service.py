from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.domain.entities.booking_request import BookingRequest
from clinic_scheduler.domain.entities.edit_request import (
    Appointment,
    SessionEditProposal,
    SessionEditRequest,
)
from clinic_scheduler.domain.entities.request_status import RequestStatus


class RequestServicePort(ABC):
    @abstractmethod
    def create_booking_request(
        self,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        raise NotImplementedError

    @abstractmethod
    def update_booking_request(
        self,
        request_id: str,
        patient_id: str,
        therapy_id: str,
        package_id: str,
        sessions: list[Session],
        discount_info: dict[str, Any] | None = None,
    ) -> BookingRequest:
        raise NotImplementedError

    @abstractmethod
    def delete_booking_request(self, request_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def get_booking_request(self, request_id: str) -> BookingRequest | None:
        raise NotImplementedError

    @abstractmethod
    def decide_booking_request(self, request_id: str, status: RequestStatus) -> BookingRequest:
        """Admin decision. Returns the request with its new status."""
        raise NotImplementedError

    @abstractmethod
    def get_appointment(self, appointment_id: str) -> Appointment | None:
        """Confirmed appointment with its sessions and edit-request history."""
        raise NotImplementedError

    @abstractmethod
    def create_session_edit_request(
        self,
        appointment_id: str,
        patient_id: str | None,
        proposals: list[SessionEditProposal],
    ) -> SessionEditRequest:
        raise NotImplementedError

    @abstractmethod
    def decide_session_edit_request(self, request_id: str, status: RequestStatus) -> SessionEditRequest:
        raise NotImplementedError
