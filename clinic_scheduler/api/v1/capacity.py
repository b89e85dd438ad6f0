from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException

from clinic_scheduler.api.v1.errors import HANDLED_ERRORS, http_error
from clinic_scheduler.api.v1.schemas import (
    DayCapacitySchema,
    DefaultCountRequestSchema,
    SetAllRequestSchema,
    SlotCapacitySchema,
)
from clinic_scheduler.application.use_cases.availability_board import AvailabilityBoard, DayAvailability
from clinic_scheduler.wiring.dependencies import get_availability_board, get_now

router = APIRouter(prefix="/capacity")


def _day_schema(day: date, slots: DayAvailability) -> DayCapacitySchema:
    return DayCapacitySchema(
        date=day,
        slots=[SlotCapacitySchema(slot_id=slot_id, count=a.count, booked=a.booked) for slot_id, a in slots.items()],
    )


@router.get("/month/{year}/{month}", response_model=list[DayCapacitySchema])
def get_month_capacity(year: int, month: int, board: AvailabilityBoard = Depends(get_availability_board)):
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Month must be between 1 and 12")
    try:
        days = board.load_month(year, month)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return [_day_schema(day, slots) for day, slots in sorted(days.items())]


# Registered before "/{day}" so "default" is never parsed as a date.
@router.put("/default", response_model=list[DayCapacitySchema])
def apply_default_count(
    req: DefaultCountRequestSchema,
    board: AvailabilityBoard = Depends(get_availability_board),
    now: datetime = Depends(get_now),
):
    try:
        days = board.apply_default_count(req.count, req.today or now.date())
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return [_day_schema(day, slots) for day, slots in sorted(days.items())]


@router.get("/{day}", response_model=DayCapacitySchema)
def get_day_capacity(day: date, board: AvailabilityBoard = Depends(get_availability_board)):
    try:
        board.load(day, day)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _day_schema(day, board.day(day))


@router.put("/{day}", response_model=DayCapacitySchema)
def set_all_slots(
    day: date,
    req: SetAllRequestSchema,
    board: AvailabilityBoard = Depends(get_availability_board),
):
    try:
        slots = board.set_all(day, req.count)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _day_schema(day, slots)


@router.post("/{day}/{slot_id}/increment", response_model=DayCapacitySchema)
def increment_slot(day: date, slot_id: str, board: AvailabilityBoard = Depends(get_availability_board)):
    try:
        slots = board.increment(day, slot_id)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _day_schema(day, slots)


@router.post("/{day}/{slot_id}/decrement", response_model=DayCapacitySchema)
def decrement_slot(day: date, slot_id: str, board: AvailabilityBoard = Depends(get_availability_board)):
    try:
        slots = board.decrement(day, slot_id)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _day_schema(day, slots)
