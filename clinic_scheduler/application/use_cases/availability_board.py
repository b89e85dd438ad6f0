from __future__ import annotations

import logging
from datetime import date, timedelta

from clinic_scheduler.application.exceptions import BookingValidationError, ClinicUpstreamError
from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.utils.dates import month_window
from clinic_scheduler.domain.entities.availability import SlotAvailability

DayAvailability = dict[str, SlotAvailability]


class AvailabilityBoard:
    """Admin view of configured therapist capacity per date and slot.

    Local changes are applied first and pushed to the clinic backend as the
    whole day; if the push fails the day is restored and the error re-raised.
    """

    def __init__(self, data: ClinicDataPort, catalog: SlotCatalogPort, default_days: int = 14) -> None:
        self._data = data
        self._catalog = catalog
        self._default_days = default_days
        self._days: dict[date, DayAvailability] = {}
        self._logger = logging.getLogger(__name__)

    def load(self, date_from: date, date_to: date) -> dict[date, DayAvailability]:
        """Fetch a range. The cache is replaced, so only the last loaded window is kept."""
        loaded = self._data.fetch_availability_range(date_from, date_to)
        self._days = {day: self._complete(slots) for day, slots in loaded.items()}
        return {day: dict(self._days[day]) for day in loaded}

    def load_month(self, year: int, month: int) -> dict[date, DayAvailability]:
        date_from, date_to = month_window(year, month)
        return self.load(date_from, date_to)

    def day(self, day: date) -> DayAvailability:
        """Per-slot capacity; dates never configured read as all zeroes."""
        return dict(self._days.get(day) or self._complete({}))

    def increment(self, day: date, slot_id: str) -> DayAvailability:
        self._catalog.get(slot_id)
        current = self.day(day)
        slot = current[slot_id]
        current[slot_id] = SlotAvailability(count=slot.count + 1, booked=slot.booked)
        return self._push(day, current)

    def decrement(self, day: date, slot_id: str) -> DayAvailability:
        self._catalog.get(slot_id)
        current = self.day(day)
        slot = current[slot_id]
        if slot.count <= 0:
            return current
        current[slot_id] = SlotAvailability(count=slot.count - 1, booked=slot.booked)
        return self._push(day, current)

    def set_all(self, day: date, count: int) -> DayAvailability:
        """Every normal slot gets `count`; limited slots are always reset to 0."""
        _check_count(count)
        previous = self.day(day)
        updated = {
            slot.id: SlotAvailability(
                count=0 if slot.is_limited else count,
                booked=previous[slot.id].booked,
            )
            for slot in self._catalog.all()
        }
        return self._push(day, updated)

    def apply_default_count(self, count: int, today: date) -> dict[date, DayAvailability]:
        """
        Store the default therapist count and write it to the next
        `default_days` days. Today and past days are left alone; existing
        values on the target days are overwritten.
        """
        _check_count(count)
        self._data.put_default_capacity(count)
        counts = self.default_counts(count)
        for offset in range(1, self._default_days + 1):
            self._data.put_day_capacity(today + timedelta(days=offset), counts)
        self._logger.info(
            "Default therapist count applied",
            extra={"date": today.isoformat(), "count": count, "days": self._default_days},
        )
        return self.load(today, today + timedelta(days=self._default_days))

    def default_counts(self, count: int) -> dict[str, int]:
        return {slot.id: 0 if slot.is_limited else count for slot in self._catalog.all()}

    def _push(self, day: date, updated: DayAvailability) -> DayAvailability:
        previous = self._days.get(day)
        self._days[day] = updated
        try:
            self._data.put_day_capacity(day, {slot_id: a.count for slot_id, a in updated.items()})
        except ClinicUpstreamError as e:
            if previous is None:
                self._days.pop(day, None)
            else:
                self._days[day] = previous
            self._logger.error("Failed to update slot capacity", extra={"date": day.isoformat(), "error": str(e)})
            raise
        return dict(updated)

    def _complete(self, slots: DayAvailability) -> DayAvailability:
        return {slot.id: slots.get(slot.id, SlotAvailability()) for slot in self._catalog.all()}


def _check_count(count: int) -> None:
    if count < 0:
        raise BookingValidationError("Please enter a valid non-negative number.", {"count": "Must be 0 or more."})
