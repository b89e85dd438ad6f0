"""
Tests for the admin availability board.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from clinic_scheduler.application.exceptions import BookingValidationError, ClinicUpstreamError
from clinic_scheduler.application.use_cases.availability_board import AvailabilityBoard
from clinic_scheduler.infrastructure.catalog.slot_catalog_store import SlotCatalogStore
from clinic_scheduler.infrastructure.clinic_api.mock_clinic import MockClinicService

DAY = date(2024, 6, 3)
SLOT = "1000-1045"


def _board(service: MockClinicService) -> AvailabilityBoard:
    return AvailabilityBoard(service, SlotCatalogStore(), default_days=14)


def test_unconfigured_day_reads_as_zero():
    board = _board(MockClinicService())

    slots = board.day(DAY)

    assert len(slots) == 15
    assert all(a.count == 0 and a.booked == 0 for a in slots.values())


def test_increment_pushes_whole_day():
    """Test that one slot change writes every slot of the day."""
    service = MockClinicService()
    board = _board(service)

    slots = board.increment(DAY, SLOT)

    assert slots[SLOT].count == 1
    assert service.capacity[DAY][SLOT] == 1
    assert len(service.capacity[DAY]) == 15


def test_decrement_stops_at_zero():
    service = MockClinicService()
    board = _board(service)

    slots = board.decrement(DAY, SLOT)

    assert slots[SLOT].count == 0
    assert DAY not in service.capacity


def test_failed_write_rolls_back():
    """Test that a backend failure restores the previous counts."""
    service = MockClinicService()
    service.capacity[DAY] = {SLOT: 2}
    board = _board(service)
    board.load(DAY, DAY)
    service.fail_writes = True

    with pytest.raises(ClinicUpstreamError):
        board.increment(DAY, SLOT)

    assert board.day(DAY)[SLOT].count == 2
    assert service.capacity[DAY] == {SLOT: 2}


def test_set_all_keeps_limited_slots_at_zero():
    service = MockClinicService()
    board = _board(service)

    slots = board.set_all(DAY, 3)

    assert slots[SLOT].count == 3
    assert slots["0830-0915"].count == 0
    assert slots["1930-2015"].count == 0


def test_negative_counts_are_rejected():
    board = _board(MockClinicService())

    with pytest.raises(BookingValidationError):
        board.set_all(DAY, -1)
    with pytest.raises(BookingValidationError):
        board.apply_default_count(-1, DAY)


def test_default_count_covers_next_fourteen_days():
    """Test that the default is written to the 14 days after today, not today itself."""
    service = MockClinicService()
    service.capacity[DAY] = {SLOT: 5}
    board = _board(service)

    days = board.apply_default_count(2, DAY)

    assert service.default_capacity == 2
    assert service.capacity[DAY] == {SLOT: 5}
    written = sorted(d for d in service.capacity if d != DAY)
    assert written == [DAY + timedelta(days=i) for i in range(1, 15)]
    assert days[DAY + timedelta(days=14)][SLOT].count == 2
    assert days[DAY + timedelta(days=1)]["1800-1845"].count == 0


def test_load_month_includes_last_day_of_previous_month():
    service = MockClinicService()
    service.capacity[date(2024, 5, 31)] = {SLOT: 1}
    service.capacity[date(2024, 5, 30)] = {SLOT: 1}
    board = _board(service)

    days = board.load_month(2024, 6)

    assert set(days) == {date(2024, 5, 31)}


def test_loading_a_month_drops_other_cached_days():
    """Test that the cache only keeps the last loaded window."""
    service = MockClinicService()
    service.capacity[date(2024, 6, 10)] = {SLOT: 3}
    service.capacity[date(2024, 7, 10)] = {SLOT: 1}
    board = _board(service)

    board.load_month(2024, 6)
    assert board.day(date(2024, 6, 10))[SLOT].count == 3

    board.load_month(2024, 7)
    assert board.day(date(2024, 7, 10))[SLOT].count == 1
    assert board.day(date(2024, 6, 10))[SLOT].count == 0
