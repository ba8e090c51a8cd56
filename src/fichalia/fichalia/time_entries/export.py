"""CSV renderings of raw entries and paired timesheets.

Every cell is quoted; callers encode the text as ``utf-8-sig`` so spreadsheet
apps pick up the accents.
"""

from __future__ import annotations

import csv
import io
import re
from datetime import tzinfo
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import to_local
from ..core.constants import DATE_FORMAT_DISPLAY, NOT_AVAILABLE, PENDING_LABEL, TIME_FORMAT, TIME_FORMAT_SHORT
from ..profiles.model import Profile
from .model import DateRange, Location, SubjectTimesheet, TimeEntry
from .pairing import format_duration

ENTRIES_HEADERS = ["Empleado", "Email", "Tipo", "Fecha", "Hora", "Ubicación"]
EMPLOYEE_ENTRIES_HEADERS = ["Fecha", "Hora", "Tipo", "Latitud", "Longitud", "Dirección"]
TIMESHEET_HEADERS = [
    "Empleado",
    "Email",
    "Fecha",
    "Hora Entrada",
    "Hora Salida",
    "Duración",
    "Ubicación Entrada",
    "Ubicación Salida",
]


def location_cell(location: Optional[Location]) -> str:
    if location is None:
        return NOT_AVAILABLE
    if location.address:
        return location.address
    if location.has_coordinates:
        return f"{location.latitude:.4f}, {location.longitude:.4f}"
    return NOT_AVAILABLE


def _write(headers: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    writer.writerows(rows)
    return out.getvalue()


def entries_csv(
    entries: Iterable[TimeEntry],
    profiles: dict[str, Profile],
    *,
    tz: Optional[tzinfo] = None,
) -> str:
    """Raw entries of several employees, one row per entry."""

    rows = []
    for entry in entries:
        profile = profiles.get(entry.subject_id)
        local = to_local(entry.timestamp, tz)
        rows.append(
            [
                profile.full_name if profile else NOT_AVAILABLE,
                profile.email if profile else NOT_AVAILABLE,
                entry.kind.label,
                local.strftime(DATE_FORMAT_DISPLAY),
                local.strftime(TIME_FORMAT_SHORT),
                location_cell(entry.location),
            ]
        )
    return _write(ENTRIES_HEADERS, rows)


def employee_entries_csv(entries: Iterable[TimeEntry], *, tz: Optional[tzinfo] = None) -> str:
    rows = []
    for entry in entries:
        local = to_local(entry.timestamp, tz)
        loc = entry.location or Location()
        rows.append(
            [
                local.strftime(DATE_FORMAT_DISPLAY),
                local.strftime(TIME_FORMAT),
                entry.kind.label,
                "" if loc.latitude is None else str(loc.latitude),
                "" if loc.longitude is None else str(loc.longitude),
                loc.address or "",
            ]
        )
    return _write(EMPLOYEE_ENTRIES_HEADERS, rows)


def timesheet_csv(timesheets: Iterable[SubjectTimesheet], *, tz: Optional[tzinfo] = None) -> str:
    """Paired sessions for every employee, most recent first within each."""

    rows = []
    for sheet in timesheets:
        for s in sheet.sessions:
            check_in = to_local(s.check_in.timestamp, tz)
            rows.append(
                [
                    sheet.full_name,
                    sheet.email,
                    check_in.strftime(DATE_FORMAT_DISPLAY),
                    check_in.strftime(TIME_FORMAT),
                    to_local(s.check_out.timestamp, tz).strftime(TIME_FORMAT) if s.check_out else PENDING_LABEL,
                    format_duration(s.duration_minutes),
                    location_cell(s.check_in.location),
                    location_cell(s.check_out.location) if s.check_out else NOT_AVAILABLE,
                ]
            )
    return _write(TIMESHEET_HEADERS, rows)


def employee_filename(full_name: str, date_range: DateRange) -> str:
    start, end = date_range.as_strings()
    # Letters (accents included), digits, dot and dash survive; anything else becomes "_".
    name = re.sub(r"[^\w.-]+", "_", full_name.strip()).strip("_")
    return f"fichajes_{name}_{start}_{end}.csv"


def timesheet_filename(date_range: DateRange) -> str:
    start, end = date_range.as_strings()
    return f"fichajes_todos_empleados_{start}_{end}.csv"


def entries_filename(date_range: DateRange) -> str:
    start, end = date_range.as_strings()
    return f"fichajes_{start}_{end}.csv"
