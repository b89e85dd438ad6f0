from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True)
class SlotDefinition:
    id: str  # "HHMM-HHMM"
    label: str
    is_limited: bool

    @property
    def start_time(self) -> time:
        start = self.id.split("-", 1)[0]
        return time(hour=int(start[:2]), minute=int(start[2:]))

    @property
    def end_time(self) -> time:
        end = self.id.split("-", 1)[1]
        return time(hour=int(end[:2]), minute=int(end[2:]))
