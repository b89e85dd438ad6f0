from __future__ import annotations

from dataclasses import dataclass, field

from clinic_scheduler.domain.entities.holiday import Holiday


@dataclass(frozen=True)
class Therapist:
    id: str
    name: str | None = None
    holidays: tuple[Holiday, ...] = field(default_factory=tuple)
