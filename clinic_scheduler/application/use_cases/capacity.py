from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from clinic_scheduler.application.utils.holiday_index import HolidayIndex
from clinic_scheduler.domain.entities.availability import SlotCapacity
from clinic_scheduler.domain.entities.booking import Booking
from clinic_scheduler.domain.entities.therapist import Therapist


class CapacityComputer:
    def compute(
        self,
        day: date,
        slot_id: str,
        bookings: Sequence[Booking],
        therapists: Sequence[Therapist],
        holiday_index: HolidayIndex | None = None,
    ) -> SlotCapacity:
        """
        Count therapists available for (day, slot) and how many of them already
        hold a booking in that slot. A therapist with several sessions in the
        same slot is counted once.
        """
        index = holiday_index or HolidayIndex(therapists)
        available = [t for t in therapists if index.is_available(t.id, day, slot_id)]

        booked = 0
        for therapist in available:
            used_slots: set[str] = set()
            for booking in bookings:
                if booking.therapist_id != therapist.id:
                    continue
                used_slots.update(s.slot_id for s in booking.sessions if s.date == day)
            if slot_id in used_slots:
                booked += 1

        return SlotCapacity(available_therapists=len(available), booked_therapists=booked)
