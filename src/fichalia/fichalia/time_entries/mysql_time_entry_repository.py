from __future__ import annotations

import uuid
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Optional, Sequence

from ..common.datetime_utils import day_bounds, ensure_aware, parse_timestamp
from ..core.enums import EntryType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Location, TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = "id, user_id, entry_type, timestamp, latitude, longitude, address, created_at"


def _to_db(value: datetime) -> datetime:
    # Stored as naive UTC.
    return ensure_aware(value).astimezone(timezone.utc).replace(tzinfo=None)


def _row_to_entry(r: dict[str, Any]) -> TimeEntry:
    latitude = r.get("latitude")
    longitude = r.get("longitude")
    address = r.get("address")
    location = None
    if latitude is not None or longitude is not None or address:
        location = Location(
            latitude=float(latitude) if latitude is not None else None,
            longitude=float(longitude) if longitude is not None else None,
            address=address or None,
        )

    created_at = r.get("created_at")
    return TimeEntry(
        id=str(r["id"]),
        subject_id=str(r["user_id"]),
        kind=EntryType(r["entry_type"]),
        timestamp=parse_timestamp(r["timestamp"]),
        location=location,
        created_at=ensure_aware(created_at) if created_at else None,
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, tz: Optional[tzinfo] = None):
        self._conn_factory = conn_factory
        self._tz = tz

    def create(
        self,
        *,
        subject_id: str,
        kind: EntryType,
        timestamp: datetime,
        location: Optional[Location] = None,
    ) -> str:
        entry_id = str(uuid.uuid4())
        location = location or Location()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_entries(id, user_id, entry_type, timestamp, latitude, longitude, address)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry_id,
                    subject_id,
                    kind.value,
                    _to_db(timestamp),
                    location.latitude,
                    location.longitude,
                    location.address,
                ),
            )
        return entry_id

    def list_entries(
        self,
        *,
        subject_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[TimeEntry]:
        clauses: list[str] = []
        params: list[object] = []

        if subject_id is not None:
            clauses.append("user_id=%s")
            params.append(subject_id)
        if start is not None:
            lower, _ = day_bounds(start, start, self._tz)
            clauses.append("timestamp >= %s")
            params.append(_to_db(lower))
        if end is not None:
            _, upper = day_bounds(end, end, self._tz)
            clauses.append("timestamp < %s")
            params.append(_to_db(upper))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                {where}
                ORDER BY timestamp DESC, seq DESC
                """,
                tuple(params),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def get_last_for_subject(self, subject_id: str) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE user_id=%s
                ORDER BY timestamp DESC, seq DESC
                LIMIT 1
                """,
                (subject_id,),
            )
            r = fetchone(cur)
            return _row_to_entry(r) if r else None
