from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Session:
    date: date
    slot_id: str
    id: str | None = None  # set once the backend has stored the session


@dataclass(frozen=True)
class Booking:
    id: str
    therapist_id: str
    sessions: tuple[Session, ...] = field(default_factory=tuple)
