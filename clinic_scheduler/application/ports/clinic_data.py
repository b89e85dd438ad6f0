from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from clinic_scheduler.domain.entities.availability import SlotAvailability
from clinic_scheduler.domain.entities.booking import Booking
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.domain.entities.therapist import Therapist


class ClinicDataPort(ABC):
    @abstractmethod
    def fetch_therapists(self) -> list[Therapist]:
        """Therapists with their holidays."""
        raise NotImplementedError

    @abstractmethod
    def fetch_bookings(self, date_from: date | None = None, date_to: date | None = None) -> list[Booking]:
        """Confirmed and pending bookings, optionally limited to a date range."""
        raise NotImplementedError

    @abstractmethod
    def fetch_packages(self) -> list[Package]:
        raise NotImplementedError

    @abstractmethod
    def fetch_availability_range(self, date_from: date, date_to: date) -> dict[date, dict[str, SlotAvailability]]:
        """Pre-aggregated per-slot capacity for every stored date in the range."""
        raise NotImplementedError

    @abstractmethod
    def put_day_capacity(self, day: date, counts: dict[str, int]) -> None:
        """Replace the therapist count of every slot on a date."""
        raise NotImplementedError

    @abstractmethod
    def put_default_capacity(self, default_capacity: int) -> None:
        raise NotImplementedError
