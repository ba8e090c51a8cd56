from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import EntryType


@dataclass(frozen=True)
class Location:
    """Where an entry was recorded. Every part is optional."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address: Optional[str] = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class TimeEntry:
    """Domain entity: one check-in or check-out. Never mutated once created."""

    id: str
    subject_id: str
    kind: EntryType
    timestamp: datetime
    location: Optional[Location] = None
    created_at: Optional[datetime] = None

    @property
    def is_check_in(self) -> bool:
        return self.kind is EntryType.CHECK_IN

    @property
    def is_check_out(self) -> bool:
        return self.kind is EntryType.CHECK_OUT


@dataclass(frozen=True)
class Session:
    """A check-in paired with the check-out that closes it (if any).

    Derived on every read; has no storage or identity of its own.
    """

    date: str
    check_in: TimeEntry
    check_out: Optional[TimeEntry]
    duration_minutes: Optional[int]
    spans_midnight: bool = False

    @property
    def in_progress(self) -> bool:
        return self.check_out is None


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def as_strings(self) -> tuple[str, str]:
        return self.start.isoformat(), self.end.isoformat()


@dataclass(frozen=True)
class SubjectTimesheet:
    """Read-model for timesheet screens and exports."""

    subject_id: str
    full_name: str
    email: str
    sessions: list[Session] = field(default_factory=list)
    by_date: dict[str, list[Session]] = field(default_factory=dict)
    total_minutes: int = 0
