from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime

from clinic_scheduler.application.exceptions import BookingValidationError
from clinic_scheduler.application.ports.request_service import RequestServicePort
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.booking_requests import ensure_transition
from clinic_scheduler.application.use_cases.conflicts import ConflictDetector
from clinic_scheduler.application.use_cases.edit_lock import EditLockPolicy
from clinic_scheduler.domain.entities.edit_request import (
    Appointment,
    PendingEdit,
    SessionEditDraft,
    SessionEditProposal,
    SessionEditRequest,
)
from clinic_scheduler.domain.entities.request_status import RequestStatus


def build_pending_map(edit_requests: Iterable[SessionEditRequest]) -> dict[str, PendingEdit]:
    """
    Map each session id to its outstanding proposal. Only pending and approved
    requests count; a later request replaces an earlier one for the same session.
    """
    pending: dict[str, PendingEdit] = {}
    for request in edit_requests:
        if not request.status.is_active:
            continue
        for proposal in request.sessions:
            pending[str(proposal.session_id)] = PendingEdit(
                request_id=request.id,
                status=request.status,
                new_date=proposal.new_date,
                new_slot_id=proposal.new_slot_id,
            )
    return pending


def has_active_request(edit_requests: Iterable[SessionEditRequest]) -> bool:
    return any(request.status.is_active for request in edit_requests)


class SessionEditRequestLifecycle:
    def __init__(
        self,
        requests: RequestServicePort,
        catalog: SlotCatalogPort,
        lock_policy: EditLockPolicy,
    ) -> None:
        self._requests = requests
        self._catalog = catalog
        self._lock_policy = lock_policy
        self._logger = logging.getLogger(__name__)

    def submit(
        self,
        appointment: Appointment,
        drafts: Sequence[SessionEditDraft],
        now: datetime,
        detector: ConflictDetector | None = None,
    ) -> SessionEditRequest:
        """
        Submit every edited session of an appointment as one bulk request.
        Sessions that already carry a pending/approved request and drafts that
        leave the session unchanged are skipped. Nothing is sent if any kept
        draft is incomplete, repeats a session, touches the lock window or,
        with a detector, moves into a full slot.
        """
        pending = build_pending_map(appointment.edit_requests)
        sessions = {s.id: s for s in appointment.sessions if s.id}

        errors: dict[str, str] = {}
        proposals: list[SessionEditProposal] = []
        seen: set[str] = set()
        for draft in drafts:
            if draft.session_id in seen:
                errors[draft.session_id] = "This session is listed more than once."
                continue
            seen.add(draft.session_id)
            session = sessions.get(draft.session_id)
            if session is None:
                errors[draft.session_id] = "Session does not belong to this appointment."
                continue
            if draft.session_id in pending:
                self._logger.info(
                    "Skipping session with an outstanding edit request",
                    extra={"request_id": pending[draft.session_id].request_id},
                )
                continue
            if draft.new_date == session.date and draft.new_slot_id == session.slot_id:
                continue
            if draft.new_date is None or not draft.new_slot_id:
                errors[draft.session_id] = "Date and slot are required."
                continue
            if not self._catalog.exists(draft.new_slot_id):
                errors[draft.session_id] = f"Unknown slot: {draft.new_slot_id}"
                continue
            if self._lock_policy.is_change_locked(session.date, session.slot_id, draft.new_date, draft.new_slot_id, now):
                errors[draft.session_id] = self._lock_policy.reason
                continue
            if detector is not None:
                # A session staying on its date keeps its own slot even when that slot is full.
                retained = session.slot_id if draft.new_date == session.date else ""
                decision = detector.is_disabled(draft.new_date, draft.new_slot_id, retained)
                if decision.disabled:
                    label = self._catalog.label_for(draft.new_slot_id)
                    errors[draft.session_id] = f"{draft.new_date.isoformat()} at {label}: {decision.reason}"
                    continue
            proposals.append(
                SessionEditProposal(
                    session_id=draft.session_id,
                    new_date=draft.new_date,
                    new_slot_id=draft.new_slot_id,
                )
            )

        if errors:
            raise BookingValidationError("Please fix the highlighted sessions before requesting changes.", errors)
        if not proposals:
            raise BookingValidationError("Please modify at least one session's date or slot before submitting.")

        request = self._requests.create_session_edit_request(
            appointment_id=appointment.id,
            patient_id=appointment.patient_id,
            proposals=proposals,
        )
        self._logger.info(
            "Session edit request submitted",
            extra={"request_id": request.id, "status": request.status.value},
        )
        return request

    def approve(self, request: SessionEditRequest) -> SessionEditRequest:
        return self._decide(request, RequestStatus.APPROVED)

    def reject(self, request: SessionEditRequest) -> SessionEditRequest:
        return self._decide(request, RequestStatus.REJECTED)

    def _decide(self, request: SessionEditRequest, status: RequestStatus) -> SessionEditRequest:
        ensure_transition(request.status, status)
        decided = self._requests.decide_session_edit_request(request.id, status)
        self._logger.info("Session edit request decided", extra={"request_id": request.id, "status": status.value})
        return decided
