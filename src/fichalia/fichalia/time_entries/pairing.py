"""Pair raw check-in/check-out entries into work sessions.

Pure functions only: no I/O, no shared state. Every screen and export that
shows sessions goes through :func:`pair_entries` so all of them agree on how
entries are matched.

Matching rules:

* each check-in is closed by the first later check-out not already used by an
  earlier check-in, scanning the subject's whole history (not just the same
  day); check-ins met during the scan do not stop it;
* a check-in with no such check-out is a session in progress;
* check-outs never used by a check-in are dropped.
"""

from __future__ import annotations

import math
from datetime import tzinfo
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import ensure_aware, local_date_key
from ..core.constants import IN_PROGRESS_LABEL
from .model import Session, TimeEntry


def _elapsed_minutes(start: TimeEntry, end: TimeEntry) -> int:
    seconds = (ensure_aware(end.timestamp) - ensure_aware(start.timestamp)).total_seconds()
    # Half-up rounding; bad data where the check-out precedes the check-in clamps to 0.
    return max(0, int(math.floor(seconds / 60 + 0.5)))


def pair_entries(entries: Iterable[TimeEntry], *, tz: Optional[tzinfo] = None) -> list[Session]:
    """Build the sessions of one subject, most recent check-in first.

    ``entries`` must belong to a single subject (see :func:`partition_by_subject`).
    ``tz`` is the display timezone used for the session date; without it the
    timestamps' own offsets are used.
    """

    ordered = sorted(entries, key=lambda e: ensure_aware(e.timestamp))
    used_check_outs: set[str] = set()
    sessions: list[Session] = []

    for i, entry in enumerate(ordered):
        if not entry.is_check_in:
            continue

        check_out = None
        for candidate in ordered[i + 1:]:
            if candidate.is_check_out and candidate.id not in used_check_outs:
                check_out = candidate
                break

        check_in_date = local_date_key(entry.timestamp, tz)
        if check_out is None:
            sessions.append(Session(date=check_in_date, check_in=entry, check_out=None, duration_minutes=None))
            continue

        used_check_outs.add(check_out.id)
        sessions.append(
            Session(
                date=check_in_date,
                check_in=entry,
                check_out=check_out,
                duration_minutes=_elapsed_minutes(entry, check_out),
                spans_midnight=local_date_key(check_out.timestamp, tz) != check_in_date,
            )
        )

    sessions.sort(key=lambda s: ensure_aware(s.check_in.timestamp), reverse=True)
    return sessions


def group_by_date(sessions: Iterable[Session]) -> dict[str, list[Session]]:
    """Sessions keyed by date; keys in first-seen order, values keep input order."""
    grouped: dict[str, list[Session]] = {}
    for session in sessions:
        grouped.setdefault(session.date, []).append(session)
    return grouped


def partition_by_subject(entries: Iterable[TimeEntry]) -> dict[str, list[TimeEntry]]:
    partitions: dict[str, list[TimeEntry]] = {}
    for entry in entries:
        partitions.setdefault(entry.subject_id, []).append(entry)
    return partitions


def total_duration_minutes(sessions: Iterable[Session]) -> int:
    return sum(s.duration_minutes or 0 for s in sessions)


def daily_totals(sessions: Sequence[Session]) -> dict[str, int]:
    return {day: total_duration_minutes(items) for day, items in group_by_date(sessions).items()}


def format_duration(minutes: Optional[int]) -> str:
    """``HH:MM`` (hours may exceed 24), or the in-progress label for ``None``."""
    if minutes is None:
        return IN_PROGRESS_LABEL
    hours, mins = divmod(int(minutes), 60)
    return f"{hours:02d}:{mins:02d}"
