from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort

LOCKED_REASON = "Sessions cannot be changed within {minutes} minutes of their start time."


class EditLockPolicy:
    def __init__(self, catalog: SlotCatalogPort, timezone: ZoneInfo, lock_minutes: int = 120) -> None:
        self._catalog = catalog
        self._timezone = timezone
        self._window = timedelta(minutes=lock_minutes)
        self._lock_minutes = lock_minutes

    @property
    def reason(self) -> str:
        return LOCKED_REASON.format(minutes=self._lock_minutes)

    def session_start(self, day: date, slot_id: str, now: datetime) -> datetime:
        start = datetime.combine(day, self._catalog.start_time(slot_id))
        if now.tzinfo is not None:
            return start.replace(tzinfo=self._timezone)
        return start

    def is_locked(self, day: date, slot_id: str, now: datetime) -> bool:
        """True when the slot starts within the lock window from `now` (or already started)."""
        return self.session_start(day, slot_id, now) - now <= self._window

    def is_change_locked(
        self,
        current_date: date,
        current_slot_id: str,
        new_date: date,
        new_slot_id: str,
        now: datetime,
    ) -> bool:
        return self.is_locked(current_date, current_slot_id, now) or self.is_locked(new_date, new_slot_id, now)
