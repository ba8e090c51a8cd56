from __future__ import annotations

import csv
import io
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from fichalia.core.enums import EntryType, Role
from fichalia.profiles.model import Profile
from fichalia.time_entries import export
from fichalia.time_entries.model import DateRange, Location, SubjectTimesheet, TimeEntry
from fichalia.time_entries.pairing import pair_entries

MADRID = ZoneInfo("Europe/Madrid")


def rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_location_cell_fallbacks():
    assert export.location_cell(None) == "N/A"
    assert export.location_cell(Location()) == "N/A"
    assert export.location_cell(Location(latitude=40.416775, longitude=-3.70379)) == "40.4168, -3.7038"
    assert export.location_cell(Location(latitude=1.0, longitude=2.0, address="Calle Mayor 1")) == "Calle Mayor 1"


def test_entries_csv_uses_profiles_and_local_time():
    profile = Profile(id="u1", email="ana@example.com", full_name="Ana García", role=Role.EMPLOYEE)
    entries = [
        TimeEntry(id="a", subject_id="u1", kind=EntryType.CHECK_IN, timestamp=utc(2025, 3, 10, 7, 5)),
        TimeEntry(id="b", subject_id="ghost", kind=EntryType.CHECK_OUT, timestamp=utc(2025, 3, 10, 15, 0)),
    ]

    out = rows(export.entries_csv(entries, {"u1": profile}, tz=MADRID))

    assert out[0] == export.ENTRIES_HEADERS
    assert out[1] == ["Ana García", "ana@example.com", "Entrada", "10/03/2025", "08:05", "N/A"]
    assert out[2][:3] == ["N/A", "N/A", "Salida"]


def test_employee_entries_csv_keeps_raw_coordinates():
    entries = [
        TimeEntry(
            id="a",
            subject_id="u1",
            kind=EntryType.CHECK_IN,
            timestamp=utc(2025, 3, 10, 7, 5, 9),
            location=Location(latitude=40.5, longitude=-3.25, address="Oficina"),
        ),
        TimeEntry(id="b", subject_id="u1", kind=EntryType.CHECK_OUT, timestamp=utc(2025, 3, 10, 15, 0)),
    ]

    out = rows(export.employee_entries_csv(entries, tz=MADRID))

    assert out[1] == ["10/03/2025", "08:05:09", "Entrada", "40.5", "-3.25", "Oficina"]
    assert out[2] == ["10/03/2025", "16:00:00", "Salida", "", "", ""]


def test_timesheet_csv_marks_pending_check_outs():
    sessions = pair_entries(
        [
            TimeEntry(id="i1", subject_id="u1", kind=EntryType.CHECK_IN, timestamp=utc(2025, 3, 10, 7, 0)),
            TimeEntry(id="o1", subject_id="u1", kind=EntryType.CHECK_OUT, timestamp=utc(2025, 3, 10, 15, 30)),
            TimeEntry(id="i2", subject_id="u1", kind=EntryType.CHECK_IN, timestamp=utc(2025, 3, 11, 7, 0)),
        ],
        tz=MADRID,
    )
    sheet = SubjectTimesheet(subject_id="u1", full_name="Ana García", email="ana@example.com", sessions=sessions)

    out = rows(export.timesheet_csv([sheet], tz=MADRID))

    assert out[0] == export.TIMESHEET_HEADERS
    assert out[1] == ["Ana García", "ana@example.com", "11/03/2025", "08:00:00", "Pendiente", "En curso...", "N/A", "N/A"]
    assert out[2] == ["Ana García", "ana@example.com", "10/03/2025", "08:00:00", "16:30:00", "08:30", "N/A", "N/A"]


def test_every_cell_is_quoted():
    text = export.employee_entries_csv([], tz=MADRID)

    assert text == '"Fecha","Hora","Tipo","Latitud","Longitud","Dirección"\n'


def test_filenames():
    date_range = DateRange(date(2025, 3, 1), date(2025, 3, 31))

    assert export.employee_filename("Ana  María García", date_range) == "fichajes_Ana_María_García_2025-03-01_2025-03-31.csv"
    assert export.timesheet_filename(date_range) == "fichajes_todos_empleados_2025-03-01_2025-03-31.csv"
    assert export.employee_filename('Łukasz "Ł" Nowak; x', date_range) == "fichajes_Łukasz_Ł_Nowak_x_2025-03-01_2025-03-31.csv"
