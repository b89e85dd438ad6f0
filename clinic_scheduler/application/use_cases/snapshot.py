from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.domain.entities.availability import AvailabilitySnapshot
from clinic_scheduler.domain.entities.booking import Booking


class SnapshotLoader:
    def __init__(self, data: ClinicDataPort) -> None:
        self._data = data
        self._logger = logging.getLogger(__name__)

    def load(self, date_from: date | None = None, date_to: date | None = None) -> AvailabilitySnapshot:
        therapists = self._data.fetch_therapists()
        bookings = self._data.fetch_bookings(date_from, date_to)
        if date_from is not None or date_to is not None:
            bookings = [_within(b, date_from, date_to) for b in bookings]
        snapshot = AvailabilitySnapshot(
            therapists=tuple(therapists),
            bookings=tuple(bookings),
            fetched_at=datetime.now(timezone.utc),
        )
        self._logger.debug(
            "Availability snapshot loaded",
            extra={"therapists": len(snapshot.therapists), "bookings": len(snapshot.bookings)},
        )
        return snapshot


def _within(booking: Booking, date_from: date | None, date_to: date | None) -> Booking:
    sessions = tuple(
        s
        for s in booking.sessions
        if (date_from is None or s.date >= date_from) and (date_to is None or s.date <= date_to)
    )
    return Booking(id=booking.id, therapist_id=booking.therapist_id, sessions=sessions)
