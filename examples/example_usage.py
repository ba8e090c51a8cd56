"""Example: pair raw entries into sessions without Flask or a database.

Controllers are a thin layer; the pairing logic is plain functions.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from fichalia.core.enums import EntryType
from fichalia.time_entries.model import TimeEntry
from fichalia.time_entries.pairing import format_duration, group_by_date, pair_entries, total_duration_minutes


def main():
    entries = [
        TimeEntry("1", "u1", EntryType.CHECK_IN, datetime(2025, 3, 10, 7, 0, tzinfo=timezone.utc)),
        TimeEntry("2", "u1", EntryType.CHECK_OUT, datetime(2025, 3, 10, 15, 0, tzinfo=timezone.utc)),
        TimeEntry("3", "u1", EntryType.CHECK_IN, datetime(2025, 3, 10, 21, 0, tzinfo=timezone.utc)),
        TimeEntry("4", "u1", EntryType.CHECK_OUT, datetime(2025, 3, 11, 1, 0, tzinfo=timezone.utc)),
        TimeEntry("5", "u1", EntryType.CHECK_IN, datetime(2025, 3, 12, 7, 0, tzinfo=timezone.utc)),
    ]
    sessions = pair_entries(entries, tz=ZoneInfo("Europe/Madrid"))

    for day, items in group_by_date(sessions).items():
        print(day, [format_duration(s.duration_minutes) for s in items])
    print("total", format_duration(total_duration_minutes(sessions)))


if __name__ == "__main__":
    main()
