from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.domain.entities.request_status import RequestStatus


@dataclass(frozen=True)
class BookingRequest:
    id: str
    patient_id: str
    therapy_id: str
    package_id: str
    sessions: tuple[Session, ...] = field(default_factory=tuple)
    status: RequestStatus = RequestStatus.PENDING
    discount_info: dict[str, Any] | None = None
