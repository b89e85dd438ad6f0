from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.domain.entities.request_status import RequestStatus


@dataclass(frozen=True)
class SessionEditProposal:
    session_id: str
    new_date: date
    new_slot_id: str


@dataclass(frozen=True)
class SessionEditRequest:
    id: str
    appointment_id: str
    sessions: tuple[SessionEditProposal, ...] = field(default_factory=tuple)
    status: RequestStatus = RequestStatus.PENDING


@dataclass(frozen=True)
class PendingEdit:
    """Outstanding proposal shown over a confirmed session until an admin decides."""

    request_id: str
    status: RequestStatus
    new_date: date
    new_slot_id: str


@dataclass(frozen=True)
class Appointment:
    id: str
    patient_id: str | None = None
    sessions: tuple[Session, ...] = field(default_factory=tuple)
    edit_requests: tuple[SessionEditRequest, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class SessionEditDraft:
    """A parent's edit of one session; date or slot may still be unset."""

    session_id: str
    new_date: date | None
    new_slot_id: str | None
