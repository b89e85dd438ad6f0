"""
Tests for the fixed clinic slot catalog and date helpers.
"""

from __future__ import annotations

from datetime import date, time

import pytest

from clinic_scheduler.application.exceptions import BookingValidationError, UnknownSlotError
from clinic_scheduler.application.utils.dates import month_window, parse_iso_date, sunday_first_weekday
from clinic_scheduler.infrastructure.catalog.slot_catalog_store import SlotCatalogStore


def test_catalog_has_fifteen_chronological_slots():
    """Test that the catalog lists every slot once, in start-time order."""
    catalog = SlotCatalogStore()
    slots = catalog.all()

    assert len(slots) == 15
    starts = [s.start_time for s in slots]
    assert starts == sorted(starts)
    assert len({s.id for s in slots}) == 15


def test_limited_slots_are_early_morning_and_evening():
    """Test that only the first two and last three slots are limited."""
    catalog = SlotCatalogStore()
    limited = [s.id for s in catalog.all() if s.is_limited]

    assert limited == ["0830-0915", "0915-1000", "1800-1845", "1845-1930", "1930-2015"]
    assert catalog.is_limited("1000-1045") is False


def test_lunch_break_has_no_slot():
    """Test that 13:45 to 14:15 is left open."""
    catalog = SlotCatalogStore()

    assert catalog.get("1300-1345").end_time == time(13, 45)
    assert catalog.get("1415-1500").start_time == time(14, 15)
    assert not catalog.exists("1345-1415")


def test_label_and_start_time_lookup():
    catalog = SlotCatalogStore()

    assert catalog.label_for("1415-1500") == "14:15 to 15:00"
    assert catalog.start_time("0830-0915") == time(8, 30)


def test_unknown_slot_raises_validation_error():
    """Test that ids outside the catalog are rejected as validation errors."""
    catalog = SlotCatalogStore()

    with pytest.raises(UnknownSlotError) as exc:
        catalog.get("2015-2100")

    assert isinstance(exc.value, BookingValidationError)
    assert exc.value.slot_id == "2015-2100"
    assert catalog.exists("") is False


def test_sunday_first_weekday():
    assert sunday_first_weekday(date(2024, 6, 2)) == 0  # Sunday
    assert sunday_first_weekday(date(2024, 6, 3)) == 1  # Monday
    assert sunday_first_weekday(date(2024, 6, 8)) == 6  # Saturday


def test_parse_iso_date_accepts_timestamps():
    assert parse_iso_date("2024-06-03T00:00:00.000Z") == date(2024, 6, 3)
    assert parse_iso_date("") is None
    assert parse_iso_date("not a date") is None


def test_month_window_starts_on_last_day_of_previous_month():
    assert month_window(2024, 3) == (date(2024, 2, 29), date(2024, 3, 31))
    assert month_window(2024, 1) == (date(2023, 12, 31), date(2024, 1, 31))
    assert month_window(2024, 12) == (date(2024, 11, 30), date(2024, 12, 31))
