from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class FullDayHoliday:
    date: date
    reason: str | None = None


@dataclass(frozen=True)
class PartialDayHoliday:
    date: date
    slot_ids: frozenset[str]
    reason: str | None = None


Holiday = FullDayHoliday | PartialDayHoliday
