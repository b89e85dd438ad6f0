from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from clinic_scheduler.domain.entities.booking import Booking
from clinic_scheduler.domain.entities.therapist import Therapist


@dataclass(frozen=True)
class AvailabilitySnapshot:
    therapists: tuple[Therapist, ...] = field(default_factory=tuple)
    bookings: tuple[Booking, ...] = field(default_factory=tuple)
    fetched_at: datetime | None = None


@dataclass(frozen=True)
class SlotCapacity:
    available_therapists: int
    booked_therapists: int


@dataclass(frozen=True)
class SlotDecision:
    disabled: bool
    reason: str = ""


@dataclass(frozen=True)
class SlotOption:
    slot_id: str
    label: str
    is_limited: bool
    capacity: SlotCapacity
    decision: SlotDecision

    @property
    def no_therapists(self) -> bool:
        return self.capacity.available_therapists == 0


@dataclass(frozen=True)
class RepeatProjection:
    dates: tuple[date, ...]
    conflicts: dict[date, str]


@dataclass(frozen=True)
class SlotAvailability:
    count: int = 0  # therapist capacity configured by admins
    booked: int = 0
