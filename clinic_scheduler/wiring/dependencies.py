from datetime import datetime
from functools import lru_cache
import logging
from zoneinfo import ZoneInfo

from clinic_scheduler.core.config import settings
from clinic_scheduler.application.ports.clinic_data import ClinicDataPort
from clinic_scheduler.application.ports.request_service import RequestServicePort
from clinic_scheduler.application.ports.slot_catalog import SlotCatalogPort
from clinic_scheduler.application.use_cases.availability_board import AvailabilityBoard
from clinic_scheduler.application.use_cases.booking_requests import BookingRequestLifecycle
from clinic_scheduler.application.use_cases.edit_lock import EditLockPolicy
from clinic_scheduler.application.use_cases.session_edit_requests import SessionEditRequestLifecycle
from clinic_scheduler.application.use_cases.snapshot import SnapshotLoader
from clinic_scheduler.infrastructure.catalog.slot_catalog_store import SlotCatalogStore
from clinic_scheduler.infrastructure.clinic_api.clinic_api_client import ClinicApiClient
from clinic_scheduler.infrastructure.clinic_api.mock_clinic import MockClinicService


_clinic_service: ClinicApiClient | MockClinicService | None = None
_availability_board: AvailabilityBoard | None = None


@lru_cache
def get_slot_catalog() -> SlotCatalogPort:
    return SlotCatalogStore()


@lru_cache
def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


def get_now() -> datetime:
    return datetime.now(get_timezone())


def get_clinic_service() -> ClinicApiClient | MockClinicService:
    global _clinic_service
    if _clinic_service is None:
        logger = logging.getLogger(__name__)
        if not settings.CLINIC_API_BASE_URL or settings.ENV.lower() in {"dev", "local"}:
            logger.info("Using MockClinicService (ENV=%s)", settings.ENV)
            _clinic_service = MockClinicService()
        else:
            logger.info("Using ClinicApiClient base_url=%s", settings.CLINIC_API_BASE_URL)
            _clinic_service = ClinicApiClient()
    return _clinic_service


def get_clinic_data() -> ClinicDataPort:
    return get_clinic_service()


def get_request_service() -> RequestServicePort:
    return get_clinic_service()


def get_snapshot_loader() -> SnapshotLoader:
    return SnapshotLoader(data=get_clinic_data())


def get_edit_lock_policy() -> EditLockPolicy:
    return EditLockPolicy(
        catalog=get_slot_catalog(),
        timezone=get_timezone(),
        lock_minutes=settings.EDIT_LOCK_MINUTES,
    )


def get_booking_lifecycle() -> BookingRequestLifecycle:
    return BookingRequestLifecycle(requests=get_request_service(), catalog=get_slot_catalog())


def get_session_edit_lifecycle() -> SessionEditRequestLifecycle:
    return SessionEditRequestLifecycle(
        requests=get_request_service(),
        catalog=get_slot_catalog(),
        lock_policy=get_edit_lock_policy(),
    )


def get_availability_board() -> AvailabilityBoard:
    global _availability_board
    if _availability_board is None:
        _availability_board = AvailabilityBoard(
            data=get_clinic_data(),
            catalog=get_slot_catalog(),
            default_days=settings.DEFAULT_CAPACITY_DAYS,
        )
    return _availability_board
