from __future__ import annotations

import re
from datetime import date
from typing import Any

from clinic_scheduler.application.exceptions import ClinicContractError
from clinic_scheduler.application.utils.dates import parse_iso_date
from clinic_scheduler.domain.entities.availability import SlotAvailability
from clinic_scheduler.domain.entities.booking import Booking, Session
from clinic_scheduler.domain.entities.booking_request import BookingRequest
from clinic_scheduler.domain.entities.edit_request import (
    Appointment,
    SessionEditProposal,
    SessionEditRequest,
)
from clinic_scheduler.domain.entities.holiday import FullDayHoliday, Holiday, PartialDayHoliday
from clinic_scheduler.domain.entities.package import Package
from clinic_scheduler.domain.entities.request_status import RequestStatus
from clinic_scheduler.domain.entities.therapist import Therapist

_LEADING_NUMBER = re.compile(r"^\s*(\d+)\D")


def _id_of(raw: Any) -> str:
    """Backend references arrive either as a plain id or as an embedded document."""
    if isinstance(raw, dict):
        return str(raw.get("_id") or raw.get("id") or "")
    if raw is None:
        return ""
    return str(raw)


def _require_date(raw: Any, what: str) -> date:
    parsed = parse_iso_date(raw)
    if parsed is None:
        raise ClinicContractError(f"Invalid {what} date: {raw!r}")
    return parsed


def parse_status(raw: Any) -> RequestStatus:
    try:
        return RequestStatus(str(raw or "pending").lower())
    except ValueError as e:
        raise ClinicContractError(f"Unknown request status: {raw!r}") from e


def parse_holiday(raw: dict[str, Any]) -> Holiday:
    day = _require_date(raw.get("date"), "holiday")
    reason = raw.get("reason")
    # Holidays without an explicit isFullDay flag are full-day holidays.
    if raw.get("isFullDay") is False and raw.get("slots"):
        slot_ids = frozenset(str(s.get("slotId")) for s in raw["slots"] if isinstance(s, dict) and s.get("slotId"))
        return PartialDayHoliday(date=day, slot_ids=slot_ids, reason=reason)
    return FullDayHoliday(date=day, reason=reason)


def parse_therapist(raw: dict[str, Any]) -> Therapist:
    name = raw.get("name")
    if not name and isinstance(raw.get("userId"), dict):
        name = raw["userId"].get("name")
    return Therapist(
        id=_id_of(raw),
        name=name,
        holidays=tuple(parse_holiday(h) for h in raw.get("holidays") or []),
    )


def parse_session(raw: dict[str, Any]) -> Session:
    return Session(
        date=_require_date(raw.get("date"), "session"),
        slot_id=str(raw.get("slotId") or raw.get("time") or ""),
        id=_id_of(raw.get("_id")) or None,
    )


def parse_booking(raw: dict[str, Any]) -> Booking:
    therapist_id = _id_of(raw.get("therapist")) or _id_of(raw.get("therapistId"))
    return Booking(
        id=_id_of(raw),
        therapist_id=therapist_id,
        sessions=tuple(parse_session(s) for s in raw.get("sessions") or []),
    )


def parse_package(raw: dict[str, Any]) -> Package:
    name = str(raw.get("name") or "")
    total = raw.get("totalSessions") or raw.get("sessionCount")
    if not total:
        match = _LEADING_NUMBER.match(name)
        total = int(match.group(1)) if match else 0
    return Package(id=_id_of(raw), total_session_count=int(total), name=name)


def parse_availability_range(raw: dict[str, Any]) -> dict[date, dict[str, SlotAvailability]]:
    result: dict[date, dict[str, SlotAvailability]] = {}
    for day in raw.get("data") or []:
        if not isinstance(day, dict) or not isinstance(day.get("sessions"), list):
            continue
        parsed_day = parse_iso_date(day.get("date"))
        if parsed_day is None:
            continue
        result[parsed_day] = {
            str(s.get("id")): SlotAvailability(
                count=s["count"] if isinstance(s.get("count"), int) else 0,
                booked=s["booked"] if isinstance(s.get("booked"), int) else 0,
            )
            for s in day["sessions"]
            if isinstance(s, dict) and s.get("id")
        }
    return result


def parse_booking_request(raw: dict[str, Any]) -> BookingRequest:
    return BookingRequest(
        id=_id_of(raw),
        patient_id=_id_of(raw.get("patient")),
        therapy_id=_id_of(raw.get("therapy")),
        package_id=_id_of(raw.get("package")),
        sessions=tuple(parse_session(s) for s in raw.get("sessions") or []),
        status=parse_status(raw.get("status")),
        discount_info=raw.get("discountInfo"),
    )


def parse_edit_request(raw: dict[str, Any]) -> SessionEditRequest:
    return SessionEditRequest(
        id=_id_of(raw),
        appointment_id=_id_of(raw.get("appointmentId")),
        sessions=tuple(
            SessionEditProposal(
                session_id=_id_of(s.get("sessionId")),
                new_date=_require_date(s.get("newDate"), "proposed"),
                new_slot_id=str(s.get("newSlotId") or ""),
            )
            for s in raw.get("sessions") or []
        ),
        status=parse_status(raw.get("status")),
    )


def parse_appointment(raw: dict[str, Any]) -> Appointment:
    patient = raw.get("patient")
    patient_id = patient.get("patientId") if isinstance(patient, dict) else patient
    return Appointment(
        id=_id_of(raw),
        patient_id=str(patient_id) if patient_id else None,
        sessions=tuple(parse_session(s) for s in raw.get("sessions") or []),
        edit_requests=tuple(parse_edit_request(er) for er in raw.get("editRequests") or []),
    )


def session_payload(sessions: list[Session]) -> list[dict[str, str]]:
    return [{"date": s.date.isoformat(), "slotId": s.slot_id} for s in sessions]
