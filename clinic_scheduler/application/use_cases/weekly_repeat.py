from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, timedelta

from clinic_scheduler.application.exceptions import BookingValidationError
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.conflicts import ConflictDetector
from clinic_scheduler.application.utils.dates import sunday_first_weekday
from clinic_scheduler.domain.entities.availability import RepeatProjection
from clinic_scheduler.domain.entities.booking import Session


class WeeklyRepeatProjector:
    def __init__(self, detector: ConflictDetector, catalog: SlotCatalogPort) -> None:
        self._detector = detector
        self._catalog = catalog
        self._logger = logging.getLogger(__name__)

    def project(
        self,
        start_date: date | None,
        weekday: int | None,
        slot_id: str | None,
        session_count: int,
        existing_sessions: Iterable[Session] = (),
    ) -> RepeatProjection:
        """
        Schedule `session_count` weekly dates on `weekday` (0 = Sunday) from
        `start_date`. Dates where the slot is full are reported in `conflicts`
        and left out of `dates`; they are never moved to a later week.
        """
        if start_date is None or weekday is None or not slot_id:
            raise BookingValidationError("Please select start date, weekday, and time slot.")
        if not 0 <= weekday <= 6:
            raise BookingValidationError("Weekday must be between 0 (Sunday) and 6 (Saturday).", {"weekday": "Invalid weekday"})
        if session_count < 1:
            raise BookingValidationError("Please select a package.", {"session_count": "Session count must be at least 1"})
        slot = self._catalog.get(slot_id)

        candidates = weekly_dates(start_date, weekday, session_count)

        taken = {(s.date, s.slot_id) for s in existing_sessions}
        if any((day, slot_id) in taken for day in candidates):
            raise BookingValidationError("One or more sessions already use this slot for these dates.")

        dates: list[date] = []
        conflicts: dict[date, str] = {}
        for day in candidates:
            decision = self._detector.is_disabled(day, slot_id, "")
            if decision.disabled:
                conflicts[day] = f"{day.isoformat()} at {slot.label}: {decision.reason}"
                continue
            dates.append(day)

        if conflicts:
            self._logger.info(
                "Weekly projection dropped conflicting dates",
                extra={"slot_id": slot_id, "reason": ",".join(d.isoformat() for d in conflicts)},
            )
        return RepeatProjection(dates=tuple(dates), conflicts=conflicts)


def weekly_dates(start_date: date, weekday: int, count: int) -> list[date]:
    current = start_date
    while sunday_first_weekday(current) != weekday:
        current += timedelta(days=1)
    return [current + timedelta(days=7 * i) for i in range(count)]
