from __future__ import annotations

from datetime import date

from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.capacity import CapacityComputer
from clinic_scheduler.application.utils.holiday_index import HolidayIndex
from clinic_scheduler.domain.entities.availability import (
    AvailabilitySnapshot,
    SlotCapacity,
    SlotDecision,
    SlotOption,
)

SLOT_FULL_REASON = "All slots are filled for this time"


class ConflictDetector:
    def __init__(
        self,
        snapshot: AvailabilitySnapshot,
        catalog: SlotCatalogPort,
        capacity: CapacityComputer | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._catalog = catalog
        self._capacity = capacity or CapacityComputer()
        self._holidays = HolidayIndex(snapshot.therapists)

    def capacity_for(self, day: date, slot_id: str) -> SlotCapacity:
        self._catalog.get(slot_id)
        return self._capacity.compute(
            day,
            slot_id,
            self._snapshot.bookings,
            self._snapshot.therapists,
            holiday_index=self._holidays,
        )

    def is_disabled(self, day: date, slot_id: str, currently_selected_slot_id: str | None = "") -> SlotDecision:
        capacity = self.capacity_for(day, slot_id)
        return self._decide(capacity, slot_id, currently_selected_slot_id)

    def slot_options(self, day: date, currently_selected_slot_id: str | None = "") -> list[SlotOption]:
        """Every catalog slot for the day with its capacity and picker decision."""
        options: list[SlotOption] = []
        for slot in self._catalog.all():
            capacity = self.capacity_for(day, slot.id)
            options.append(
                SlotOption(
                    slot_id=slot.id,
                    label=slot.label,
                    is_limited=slot.is_limited,
                    capacity=capacity,
                    decision=self._decide(capacity, slot.id, currently_selected_slot_id),
                )
            )
        return options

    @staticmethod
    def _decide(capacity: SlotCapacity, slot_id: str, currently_selected_slot_id: str | None) -> SlotDecision:
        # The session being edited keeps its own slot even when that slot is full.
        if currently_selected_slot_id and slot_id == currently_selected_slot_id:
            return SlotDecision(disabled=False)
        available = capacity.available_therapists
        if available > 0 and capacity.booked_therapists >= available:
            return SlotDecision(disabled=True, reason=SLOT_FULL_REASON)
        return SlotDecision(disabled=False)
