from __future__ import annotations


class BookingValidationError(ValueError):
    """Raised before any network call when user input cannot be submitted.

    `errors` maps the offending field (or session id) to a message so callers
    can report it next to that field.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = dict(errors or {})


class UnknownSlotError(BookingValidationError):
    """Raised when a slot id is not part of the clinic slot catalog."""

    def __init__(self, slot_id: str) -> None:
        super().__init__(f"Unknown slot: {slot_id}", {"slot_id": f"Unknown slot: {slot_id}"})
        self.slot_id = slot_id


class InvalidTransitionError(RuntimeError):
    """Raised when a request is changed outside the state that allows it."""
    pass


class ClinicUpstreamError(RuntimeError):
    """Raised when the clinic backend fails (non-2xx, timeouts, network errors)."""
    pass


class ClinicContractError(RuntimeError):
    """Raised when the clinic backend returns a payload we cannot read."""
    pass
