from collections.abc import Iterable
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Response

from clinic_scheduler.api.v1.errors import HANDLED_ERRORS, http_error
from clinic_scheduler.api.v1.schemas import (
    BookingRequestCreateSchema,
    BookingRequestSchema,
    BookingRequestUpdateSchema,
    PendingEditSchema,
    SessionEditProposalSchema,
    SessionEditRequestSchema,
    SessionEditSubmitSchema,
    SessionSchema,
)
from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.application.ports.request_service import RequestServicePort
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.booking_requests import BookingRequestLifecycle
from clinic_scheduler.application.use_cases.conflicts import ConflictDetector
from clinic_scheduler.application.use_cases.session_edit_requests import (
    SessionEditRequestLifecycle,
    build_pending_map,
)
from clinic_scheduler.application.use_cases.snapshot import SnapshotLoader
from clinic_scheduler.domain.entities.booking import Session
from clinic_scheduler.domain.entities.booking_request import BookingRequest
from clinic_scheduler.domain.entities.edit_request import SessionEditDraft, SessionEditRequest
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.wiring.dependencies import (
    get_booking_lifecycle,
    get_clinic_data,
    get_now,
    get_request_service,
    get_session_edit_lifecycle,
    get_slot_catalog,
    get_snapshot_loader,
)

router = APIRouter()


def _find_package(data: ClinicDataPort, package_id: str) -> Package | None:
    if not package_id:
        return None
    return next((p for p in data.fetch_packages() if p.id == package_id), None)


def _detector(loader: SnapshotLoader, catalog: SlotCatalogPort, days: Iterable[date | None]) -> ConflictDetector | None:
    """Conflict detector over a snapshot covering the given days."""
    known = [d for d in days if d is not None]
    if not known:
        return None
    return ConflictDetector(loader.load(min(known), max(known)), catalog)


def _booking_request_schema(request: BookingRequest) -> BookingRequestSchema:
    return BookingRequestSchema(
        id=request.id,
        patient_id=request.patient_id,
        therapy_id=request.therapy_id,
        package_id=request.package_id,
        sessions=[SessionSchema(date=s.date, slot_id=s.slot_id, id=s.id) for s in request.sessions],
        status=request.status,
        discount_info=request.discount_info,
    )


def _edit_request_schema(request: SessionEditRequest) -> SessionEditRequestSchema:
    return SessionEditRequestSchema(
        id=request.id,
        appointment_id=request.appointment_id,
        sessions=[
            SessionEditProposalSchema(session_id=p.session_id, new_date=p.new_date, new_slot_id=p.new_slot_id)
            for p in request.sessions
        ],
        status=request.status,
    )


def _load_booking_request(requests: RequestServicePort, request_id: str) -> BookingRequest:
    request = requests.get_booking_request(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail="Booking request not found")
    return request


@router.post("/booking-requests", response_model=BookingRequestSchema, status_code=201)
def create_booking_request(
    req: BookingRequestCreateSchema,
    lifecycle: BookingRequestLifecycle = Depends(get_booking_lifecycle),
    data: ClinicDataPort = Depends(get_clinic_data),
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    try:
        package = _find_package(data, req.package_id)
        sessions = [Session(date=s.date, slot_id=s.slot_id) for s in req.sessions]
        created = lifecycle.create(
            patient_id=req.patient_id,
            therapy_id=req.therapy_id,
            package=package,
            sessions=sessions,
            discount_info=req.discount_info,
            detector=_detector(loader, catalog, [s.date for s in sessions]),
        )
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _booking_request_schema(created)


@router.put("/booking-requests/{request_id}", response_model=BookingRequestSchema)
def update_booking_request(
    request_id: str,
    req: BookingRequestUpdateSchema,
    lifecycle: BookingRequestLifecycle = Depends(get_booking_lifecycle),
    requests: RequestServicePort = Depends(get_request_service),
    data: ClinicDataPort = Depends(get_clinic_data),
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    try:
        current = _load_booking_request(requests, request_id)
        sessions = [Session(date=s.date, slot_id=s.slot_id) for s in req.sessions]
        updated = lifecycle.update(
            current,
            sessions=sessions,
            package=_find_package(data, req.package_id),
            discount_info=req.discount_info,
            detector=_detector(loader, catalog, [s.date for s in sessions]),
        )
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _booking_request_schema(updated)


@router.delete("/booking-requests/{request_id}", status_code=204)
def delete_booking_request(
    request_id: str,
    lifecycle: BookingRequestLifecycle = Depends(get_booking_lifecycle),
    requests: RequestServicePort = Depends(get_request_service),
) -> Response:
    try:
        lifecycle.delete(_load_booking_request(requests, request_id))
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return Response(status_code=204)


@router.post("/booking-requests/{request_id}/{decision}", response_model=BookingRequestSchema)
def decide_booking_request(
    request_id: str,
    decision: str,
    lifecycle: BookingRequestLifecycle = Depends(get_booking_lifecycle),
    requests: RequestServicePort = Depends(get_request_service),
):
    if decision not in {"approve", "reject"}:
        raise HTTPException(status_code=404, detail="Unknown decision")
    try:
        current = _load_booking_request(requests, request_id)
        decided = lifecycle.approve(current) if decision == "approve" else lifecycle.reject(current)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _booking_request_schema(decided)


@router.get("/appointments/{appointment_id}/pending-edits", response_model=list[PendingEditSchema])
def pending_edits(
    appointment_id: str,
    requests: RequestServicePort = Depends(get_request_service),
):
    try:
        appointment = requests.get_appointment(appointment_id)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    if appointment is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    return [
        PendingEditSchema(
            session_id=session_id,
            request_id=edit.request_id,
            status=edit.status,
            new_date=edit.new_date,
            new_slot_id=edit.new_slot_id,
        )
        for session_id, edit in build_pending_map(appointment.edit_requests).items()
    ]


@router.post("/appointments/{appointment_id}/edit-requests", response_model=SessionEditRequestSchema, status_code=201)
def submit_edit_request(
    appointment_id: str,
    req: SessionEditSubmitSchema,
    lifecycle: SessionEditRequestLifecycle = Depends(get_session_edit_lifecycle),
    requests: RequestServicePort = Depends(get_request_service),
    now: datetime = Depends(get_now),
    catalog: SlotCatalogPort = Depends(get_slot_catalog),
    loader: SnapshotLoader = Depends(get_snapshot_loader),
):
    try:
        appointment = requests.get_appointment(appointment_id)
        if appointment is None:
            raise HTTPException(status_code=404, detail="Appointment not found")
        drafts = [SessionEditDraft(session_id=d.session_id, new_date=d.new_date, new_slot_id=d.new_slot_id) for d in req.sessions]
        submitted = lifecycle.submit(
            appointment,
            drafts,
            now,
            detector=_detector(loader, catalog, [d.new_date for d in drafts]),
        )
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _edit_request_schema(submitted)


@router.post(
    "/appointments/{appointment_id}/edit-requests/{request_id}/{decision}",
    response_model=SessionEditRequestSchema,
)
def decide_edit_request(
    appointment_id: str,
    request_id: str,
    decision: str,
    lifecycle: SessionEditRequestLifecycle = Depends(get_session_edit_lifecycle),
    requests: RequestServicePort = Depends(get_request_service),
):
    if decision not in {"approve", "reject"}:
        raise HTTPException(status_code=404, detail="Unknown decision")
    try:
        appointment = requests.get_appointment(appointment_id)
        current = next((er for er in appointment.edit_requests if er.id == request_id), None) if appointment else None
        if current is None:
            raise HTTPException(status_code=404, detail="Edit request not found")
        decided = lifecycle.approve(current) if decision == "approve" else lifecycle.reject(current)
    except HANDLED_ERRORS as e:
        raise http_error(e) from e
    return _edit_request_schema(decided)
