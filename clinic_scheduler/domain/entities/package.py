from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Package:
    id: str
    total_session_count: int
    name: str = ""
