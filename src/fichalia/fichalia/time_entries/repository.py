from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EntryType
from .model import Location, TimeEntry


class TimeEntryRepository(Protocol):
    """Storage for raw time entries.

    The service layer depends on this interface; entries are insert-only.
    """

    def create(
        self,
        *,
        subject_id: str,
        kind: EntryType,
        timestamp: datetime,
        location: Optional[Location] = None,
    ) -> str:
        raise NotImplementedError

    def list_entries(
        self,
        *,
        subject_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TimeEntry]:
        """Entries newest first; ``start``/``end`` are inclusive local dates."""

        raise NotImplementedError

    def get_last_for_subject(self, subject_id: str) -> Optional[TimeEntry]:
        raise NotImplementedError
