from __future__ import annotations

import logging

from fastapi import HTTPException

from clinic_scheduler.application.exceptions import (
    BookingValidationError,
    ClinicContractError,
    ClinicUpstreamError,
    InvalidTransitionError,
)

HANDLED_ERRORS = (BookingValidationError, InvalidTransitionError, ClinicUpstreamError, ClinicContractError)
UPSTREAM_MESSAGE = "The clinic service could not complete the request. Please try again."

logger = logging.getLogger(__name__)


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, BookingValidationError):
        return HTTPException(status_code=400, detail={"message": e.message, "errors": e.errors})
    if isinstance(e, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(e))
    logger.warning("Clinic backend failure", extra={"error": str(e)})
    return HTTPException(status_code=502, detail=UPSTREAM_MESSAGE)
