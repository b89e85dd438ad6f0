from __future__ import annotations

from enum import Enum


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_active(self) -> bool:
        """Pending and approved requests still claim their sessions."""
        return self in (RequestStatus.PENDING, RequestStatus.APPROVED)
