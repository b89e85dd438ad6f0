from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException

from clinic_scheduler.api.v1.errors import HANDLED_ERRORS, http_error
from clinic_scheduler.api.v1.schemas import (
    DayAvailabilitySchema,
    EditLockCheckRequestSchema,
    EditLockCheckResponseSchema,
    SlotOptionSchema,
    SlotSchema,
    WeeklyProjectionRequestSchema,
    WeeklyProjectionResponseSchema,
)
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.conflicts import ConflictDetector
from clinic_scheduler.application.use_cases.edit_lock import EditLockPolicy
from clinic_scheduler.application.use_cases.snapshot import SnapshotLoader
from clinic_scheduler.application.use_cases.weekly_repeat import WeeklyRepeatProjector
from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.wiring.dependencies import (
    get_edit_lock_policy,
    get_now,
    get_slot_catalog,
    get_snapshot_loader,
)

router = APIRouter()


@router.get("/slots", response_model=list[SlotSchema])
def list_slots(catalog: SlotCatalogPort = Depends(get_slot_catalog)):
    return [SlotSchema(id=s.id, label=s.label, is_limited=s.is_limited) for s in catalog.all()]


@router.get("/availability/{day}", response_model=DayAvailabilitySchema)
def day_availability(
    day: date,
    current_slot_id: str = "",
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    try:
        if current_slot_id and not catalog.exists(current_slot_id):
            raise HTTPException(status_code=400, detail=f"Unknown slot: {current_slot_id}")
        detector = ConflictDetector(loader.load(day, day), catalog)
        options = detector.slot_options(day, current_slot_id)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e

    return DayAvailabilitySchema(
        date=day,
        options=[
            SlotOptionSchema(
                slot_id=o.slot_id,
                label=o.label,
                is_limited=o.is_limited,
                available_therapists=o.capacity.available_therapists,
                booked_therapists=o.capacity.booked_therapists,
                disabled=o.decision.disabled,
                reason=o.decision.reason,
                no_therapists=o.no_therapists,
            )
            for o in options
        ],
    )


@router.post("/availability/weekly-projection", response_model=WeeklyProjectionResponseSchema)
def weekly_projection(
    req: WeeklyProjectionRequestSchema,
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    try:
        date_to = None
        if req.start_date is not None:
            date_to = req.start_date + timedelta(weeks=max(req.session_count, 0) + 1)
        detector = ConflictDetector(loader.load(req.start_date, date_to), catalog)
        projection = WeeklyRepeatProjector(detector, catalog).project(
            start_date=req.start_date,
            weekday=req.weekday,
            slot_id=req.slot_id,
            session_count=req.session_count,
            existing_sessions=[Session(date=s.date, slot_id=s.slot_id) for s in req.existing_sessions],
        )
    except HANDLED_ERRORS as e:
        raise http_error(e) from e

    return WeeklyProjectionResponseSchema(
        dates=list(projection.dates),
        conflicts={d.isoformat(): msg for d, msg in projection.conflicts.items()},
    )


@router.post("/edit-lock/check", response_model=EditLockCheckResponseSchema)
def check_edit_lock(
    req: EditLockCheckRequestSchema,
    policy: EditLockPolicy = Depends(get_edit_lock_policy),
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    now: datetime = Depends(get_now),
):
    try:
        current_now = req.now or now
        catalog.get(req.slot_id)
        if req.new_date is not None and req.new_slot_id:
            locked = policy.is_change_locked(req.date, req.slot_id, req.new_date, req.new_slot_id, current_now)
        else:
            locked = policy.is_locked(req.date, req.slot_id, current_now)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e

    return EditLockCheckResponseSchema(locked=locked, reason=policy.reason if locked else "")
