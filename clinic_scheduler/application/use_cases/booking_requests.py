from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from clinic_scheduler.application.exceptions import BookingValidationError, InvalidTransitionError
from clinic_scheduler.application.ports.request_service import RequestServicePort
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.conflicts import ConflictDetector
from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.domain.entities.booking_request import BookingRequest
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.domain.entities.request_status import RequestStatus

MISSING_FIELDS_MESSAGE = "Please fill all required fields and select a session date and time."


def ensure_transition(current: RequestStatus, target: RequestStatus) -> None:
    """Pending is the only state with outgoing transitions."""
    if current is not RequestStatus.PENDING:
        raise InvalidTransitionError(f"Request is already {current.value}")
    if target is RequestStatus.PENDING:
        raise InvalidTransitionError("Request is already pending")


class BookingRequestLifecycle:
    def __init__(self, requests: RequestServicePort, catalog: SlotCatalogPort) -> None:
        self._requests = requests
        self._catalog = catalog
        self._logger = logging.getLogger(__name__)

    def create(
        self,
        patient_id: str,
        therapy_id: str,
        package: Package | None,
        sessions: Sequence[Session],
        discount_info: dict[str, Any] | None = None,
        detector: ConflictDetector | None = None,
    ) -> BookingRequest:
        package = self.validate(patient_id, therapy_id, package, sessions, detector)
        request = self._requests.create_booking_request(
            patient_id=patient_id,
            therapy_id=therapy_id,
            package_id=package.id,
            sessions=list(sessions),
            discount_info=discount_info,
        )
        self._logger.info(
            "Booking request created",
            extra={"request_id": request.id, "status": request.status.value},
        )
        return request

    def update(
        self,
        request: BookingRequest,
        sessions: Sequence[Session],
        package: Package | None,
        discount_info: dict[str, Any] | None = None,
        detector: ConflictDetector | None = None,
    ) -> BookingRequest:
        if request.status is not RequestStatus.PENDING:
            raise InvalidTransitionError(f"Only pending requests can be edited (request is {request.status.value})")
        package = self.validate(request.patient_id, request.therapy_id, package, sessions, detector)
        updated = self._requests.update_booking_request(
            request_id=request.id,
            patient_id=request.patient_id,
            therapy_id=request.therapy_id,
            package_id=package.id,
            sessions=list(sessions),
            discount_info=discount_info if discount_info is not None else request.discount_info,
        )
        self._logger.info("Booking request updated", extra={"request_id": request.id})
        return updated

    def delete(self, request: BookingRequest) -> None:
        if request.status is not RequestStatus.PENDING:
            raise InvalidTransitionError(f"Only pending requests can be deleted (request is {request.status.value})")
        self._requests.delete_booking_request(request.id)
        self._logger.info("Booking request deleted", extra={"request_id": request.id})

    def approve(self, request: BookingRequest) -> BookingRequest:
        return self._decide(request, RequestStatus.APPROVED)

    def reject(self, request: BookingRequest) -> BookingRequest:
        return self._decide(request, RequestStatus.REJECTED)

    def _decide(self, request: BookingRequest, status: RequestStatus) -> BookingRequest:
        ensure_transition(request.status, status)
        decided = self._requests.decide_booking_request(request.id, status)
        self._logger.info("Booking request decided", extra={"request_id": request.id, "status": status.value})
        return decided

    def validate(
        self,
        patient_id: str,
        therapy_id: str,
        package: Package | None,
        sessions: Sequence[Session],
        detector: ConflictDetector | None = None,
    ) -> Package:
        """
        Check a request before it is sent and return its package. With a
        detector, sessions that land in a full slot are reported per session.
        """
        errors: dict[str, str] = {}
        if not patient_id:
            errors["patient_id"] = "Patient is required."
        if not therapy_id:
            errors["therapy_id"] = "Therapy is required."
        if package is None:
            errors["package_id"] = "Package is required."
        if not sessions:
            errors["sessions"] = "Select at least one session date and time."

        seen: set[tuple[Any, str]] = set()
        for idx, session in enumerate(sessions):
            field = f"sessions[{idx}]"
            if session.date is None or not session.slot_id:
                errors[field] = "Date and slot are required."
                continue
            if not self._catalog.exists(session.slot_id):
                errors[field] = f"Unknown slot: {session.slot_id}"
                continue
            key = (session.date, session.slot_id)
            if key in seen:
                errors[field] = "This slot is already selected for this date."
            seen.add(key)

        if errors or package is None:
            raise BookingValidationError(MISSING_FIELDS_MESSAGE, errors)

        if detector is not None:
            conflicts = full_slot_errors(detector, self._catalog, sessions)
            if conflicts:
                raise BookingValidationError("Some selected sessions are no longer available.", conflicts)

        if len(sessions) > package.total_session_count:
            raise BookingValidationError(
                f"This package allows at most {package.total_session_count} sessions.",
                {"sessions": f"{len(sessions)} sessions selected, limit is {package.total_session_count}."},
            )
        return package


def full_slot_errors(
    detector: ConflictDetector,
    catalog: SlotCatalogPort,
    sessions: Sequence[Session],
) -> dict[str, str]:
    errors: dict[str, str] = {}
    for idx, session in enumerate(sessions):
        decision = detector.is_disabled(session.date, session.slot_id, "")
        if decision.disabled:
            label = catalog.label_for(session.slot_id)
            errors[f"sessions[{idx}]"] = f"{session.date.isoformat()} at {label}: {decision.reason}"
    return errors
