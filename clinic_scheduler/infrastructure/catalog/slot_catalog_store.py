from __future__ import annotations

from clinic_scheduler.application.exceptions import UnknownSlotError
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.domain.entities.slot import SlotDefinition
from clinic_scheduler.infrastructure.catalog.slot_catalog_data import SLOT_CATALOG


class SlotCatalogStore(SlotCatalogPort):
    def __init__(self, slots: tuple[SlotDefinition, ...] | None = None) -> None:
        self._slots = slots or SLOT_CATALOG
        self._by_id = {slot.id: slot for slot in self._slots}

    def get(self, slot_id: str) -> SlotDefinition:
        slot = self._by_id.get((slot_id or "").strip())
        if slot is None:
            raise UnknownSlotError(slot_id)
        return slot

    def exists(self, slot_id: str) -> bool:
        return (slot_id or "").strip() in self._by_id

    def all(self) -> tuple[SlotDefinition, ...]:
        return self._slots
