from __future__ import annotations

import logging
from datetime import datetime, tzinfo
from typing import Callable, Optional

from ..common.datetime_utils import now_utc, to_local
from ..common.validators import require_coordinates
from ..core.constants import DATE_FORMAT_DISPLAY, MAPS_URL, TIME_FORMAT
from ..core.enums import EntryType
from ..core.exceptions import NotFoundError, ValidationError
from ..profiles.model import Profile
from ..profiles.repository import ProfileRepository
from .model import DateRange, Location, Session, SubjectTimesheet, TimeEntry
from .pairing import (
    daily_totals,
    format_duration,
    group_by_date,
    pair_entries,
    partition_by_subject,
    total_duration_minutes,
)
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


class TimeEntryService:
    """Use cases around time entries: record them, read them back as sessions."""

    def __init__(
        self,
        entries: TimeEntryRepository,
        profiles: ProfileRepository,
        *,
        tz: Optional[tzinfo] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._entries = entries
        self._profiles = profiles
        self._tz = tz
        self._clock = clock or now_utc

    def _require_active(self, subject_id: str) -> Profile:
        profile = self._profiles.get_by_id(subject_id)
        if not profile:
            raise NotFoundError("Empleado no encontrado")
        if not profile.active:
            raise ValidationError("El empleado está desactivado")
        return profile

    def current_status(self, subject_id: str) -> Optional[EntryType]:
        last = self._entries.get_last_for_subject(subject_id)
        return last.kind if last else None

    def record(
        self,
        subject_id: str,
        kind: EntryType,
        *,
        location: Optional[Location] = None,
        now: Optional[datetime] = None,
    ) -> TimeEntry:
        self._require_active(subject_id)
        if location is not None:
            require_coordinates(location.latitude, location.longitude)

        last_kind = self.current_status(subject_id)
        if kind is EntryType.CHECK_IN and last_kind is EntryType.CHECK_IN:
            logger.warning("Rejected check-in for %s: already checked in", subject_id)
            raise ValidationError("Ya has fichado la entrada")
        if kind is EntryType.CHECK_OUT and last_kind is not EntryType.CHECK_IN:
            logger.warning("Rejected check-out for %s: not checked in", subject_id)
            raise ValidationError("No has fichado la entrada")

        timestamp = now or self._clock()
        entry_id = self._entries.create(subject_id=subject_id, kind=kind, timestamp=timestamp, location=location)
        logger.info("Recorded %s for %s at %s", kind.value, subject_id, timestamp.isoformat())
        return TimeEntry(id=entry_id, subject_id=subject_id, kind=kind, timestamp=timestamp, location=location)

    def check_in(self, subject_id: str, **kwargs) -> TimeEntry:
        return self.record(subject_id, EntryType.CHECK_IN, **kwargs)

    def check_out(self, subject_id: str, **kwargs) -> TimeEntry:
        return self.record(subject_id, EntryType.CHECK_OUT, **kwargs)

    def toggle(self, subject_id: str, **kwargs) -> TimeEntry:
        """Check out when checked in, otherwise check in."""
        last_kind = self.current_status(subject_id)
        kind = last_kind.opposite if last_kind else EntryType.CHECK_IN
        return self.record(subject_id, kind, **kwargs)

    def get_entries(self, subject_id: Optional[str] = None, *, date_range: Optional[DateRange] = None) -> list[TimeEntry]:
        start, end = (date_range.start, date_range.end) if date_range else (None, None)
        return list(self._entries.list_entries(subject_id=subject_id, start=start, end=end))

    def get_sessions(self, subject_id: str, *, date_range: Optional[DateRange] = None) -> list[Session]:
        # Storage is newest first; pair in insertion order so equal timestamps stay deterministic.
        return pair_entries(self.get_entries(subject_id, date_range=date_range)[::-1], tz=self._tz)

    def _timesheet(self, profile: Profile, sessions: list[Session]) -> SubjectTimesheet:
        return SubjectTimesheet(
            subject_id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            sessions=sessions,
            by_date=group_by_date(sessions),
            total_minutes=total_duration_minutes(sessions),
        )

    def get_timesheet(self, subject_id: str, *, date_range: Optional[DateRange] = None) -> SubjectTimesheet:
        profile = self._profiles.get_by_id(subject_id)
        if not profile:
            raise NotFoundError("Empleado no encontrado")
        return self._timesheet(profile, self.get_sessions(subject_id, date_range=date_range))

    def get_all_timesheets(self, *, date_range: DateRange, subject_id: Optional[str] = None) -> list[SubjectTimesheet]:
        profiles = list(self._profiles.list_active())
        if subject_id is not None:
            profiles = [p for p in profiles if p.id == subject_id]

        partitions = partition_by_subject(self.get_entries(subject_id, date_range=date_range)[::-1])
        return [
            self._timesheet(p, pair_entries(partitions.get(p.id, []), tz=self._tz))
            for p in profiles
        ]

    def history_ui(self, subject_id: str, *, date_range: Optional[DateRange] = None) -> list[dict]:
        return self.timesheet_history(self.get_timesheet(subject_id, date_range=date_range))

    def timesheet_history(self, sheet: SubjectTimesheet) -> list[dict]:
        """Per-day blocks of an already built timesheet, most recent day first."""
        totals = daily_totals(sheet.sessions)
        return [
            {
                "date": day,
                "total": format_duration(totals[day]),
                "sessions": [self.session_to_ui(s) for s in sheet.by_date[day]],
            }
            for day in sorted(sheet.by_date, reverse=True)
        ]

    def session_to_ui(self, s: Session) -> dict:
        check_in_local = to_local(s.check_in.timestamp, self._tz)
        check_out_local = to_local(s.check_out.timestamp, self._tz) if s.check_out else None
        return {
            "date": s.date,
            "check_in": check_in_local.strftime(TIME_FORMAT),
            "check_out": check_out_local.strftime(TIME_FORMAT) if check_out_local else None,
            "check_out_date": check_out_local.strftime(DATE_FORMAT_DISPLAY) if s.spans_midnight else None,
            "duration": format_duration(s.duration_minutes),
            "duration_minutes": s.duration_minutes,
            "spans_midnight": s.spans_midnight,
            "check_in_map": _map_link(s.check_in.location),
            "check_out_map": _map_link(s.check_out.location) if s.check_out else None,
        }


def _map_link(location: Optional[Location]) -> Optional[str]:
    if location is None or not location.has_coordinates:
        return None
    return MAPS_URL.format(lat=location.latitude, lon=location.longitude)
