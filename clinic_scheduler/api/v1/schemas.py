from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from clinic_scheduler.domain.entities.request_status import RequestStatus


class SlotSchema(BaseModel):
    id: str
    label: str
    is_limited: bool


class SessionSchema(BaseModel):
    date: date
    slot_id: str
    id: str | None = None


class SlotOptionSchema(BaseModel):
    slot_id: str
    label: str
    is_limited: bool
    available_therapists: int
    booked_therapists: int
    disabled: bool
    reason: str = ""
    no_therapists: bool = False


class DayAvailabilitySchema(BaseModel):
    date: date
    options: list[SlotOptionSchema]


class WeeklyProjectionRequestSchema(BaseModel):
    start_date: date | None = None
    weekday: int | None = None  # 0 = Sunday
    slot_id: str | None = None
    session_count: int = 0
    existing_sessions: list[SessionSchema] = Field(default_factory=list)


class WeeklyProjectionResponseSchema(BaseModel):
    dates: list[date]
    conflicts: dict[str, str] = Field(default_factory=dict)


class EditLockCheckRequestSchema(BaseModel):
    date: date
    slot_id: str
    new_date: date | None = None
    new_slot_id: str | None = None
    now: datetime | None = None


class EditLockCheckResponseSchema(BaseModel):
    locked: bool
    reason: str = ""


class BookingRequestCreateSchema(BaseModel):
    patient_id: str = ""
    therapy_id: str = ""
    package_id: str = ""
    sessions: list[SessionSchema] = Field(default_factory=list)
    discount_info: dict[str, Any] | None = None


class BookingRequestUpdateSchema(BaseModel):
    package_id: str
    sessions: list[SessionSchema] = Field(default_factory=list)
    discount_info: dict[str, Any] | None = None


class BookingRequestSchema(BaseModel):
    id: str
    patient_id: str
    therapy_id: str
    package_id: str
    sessions: list[SessionSchema]
    status: RequestStatus
    discount_info: dict[str, Any] | None = None


class SessionEditDraftSchema(BaseModel):
    session_id: str
    new_date: date | None = None
    new_slot_id: str | None = None


class SessionEditSubmitSchema(BaseModel):
    sessions: list[SessionEditDraftSchema] = Field(min_length=1)


class SessionEditProposalSchema(BaseModel):
    session_id: str
    new_date: date
    new_slot_id: str


class SessionEditRequestSchema(BaseModel):
    id: str
    appointment_id: str
    sessions: list[SessionEditProposalSchema]
    status: RequestStatus


class PendingEditSchema(BaseModel):
    session_id: str
    request_id: str
    status: RequestStatus
    new_date: date
    new_slot_id: str


class SlotCapacitySchema(BaseModel):
    slot_id: str
    count: int
    booked: int


class DayCapacitySchema(BaseModel):
    date: date
    slots: list[SlotCapacitySchema]


class SetAllRequestSchema(BaseModel):
    count: int


class DefaultCountRequestSchema(BaseModel):
    count: int
    today: date | None = None
