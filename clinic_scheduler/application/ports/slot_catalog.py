from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import time

from clinic_scheduler.domain.entities.slot import SlotDefinition


class SlotCatalogPort(ABC):
    @abstractmethod
    def get(self, slot_id: str) -> SlotDefinition:
        """Get slot definition. Raises UnknownSlotError for ids outside the catalog."""
        raise NotImplementedError

    @abstractmethod
    def exists(self, slot_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def all(self) -> tuple[SlotDefinition, ...]:
        """All slots in chronological order."""
        raise NotImplementedError

    def label_for(self, slot_id: str) -> str:
        return self.get(slot_id).label

    def is_limited(self, slot_id: str) -> bool:
        return self.get(slot_id).is_limited

    def start_time(self, slot_id: str) -> time:
        return self.get(slot_id).start_time
