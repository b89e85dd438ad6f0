from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from clinic_scheduler.domain.entities.holiday import FullDayHoliday, Holiday, PartialDayHoliday
from clinic_scheduler.domain.entities.therapist import Therapist


class HolidayIndex:
    def __init__(self, therapists: Iterable[Therapist]) -> None:
        self._full_days: dict[str, set[date]] = {}
        self._partial_days: dict[str, dict[date, set[str]]] = {}
        for therapist in therapists:
            self._add(therapist.id, therapist.holidays)

    def _add(self, therapist_id: str, holidays: Iterable[Holiday]) -> None:
        full = self._full_days.setdefault(therapist_id, set())
        partial = self._partial_days.setdefault(therapist_id, {})
        for holiday in holidays:
            if isinstance(holiday, FullDayHoliday):
                full.add(holiday.date)
            elif isinstance(holiday, PartialDayHoliday):
                partial.setdefault(holiday.date, set()).update(holiday.slot_ids)

    def is_available(self, therapist_id: str, day: date, slot_id: str | None = None) -> bool:
        """
        A full-day holiday removes the therapist from every slot that day.
        A partial-day holiday only counts when the slot asked about is one of its slots.
        """
        if day in self._full_days.get(therapist_id, ()):
            return False
        if slot_id is None:
            return True
        blocked_slots = self._partial_days.get(therapist_id, {}).get(day, ())
        return slot_id not in blocked_slots
