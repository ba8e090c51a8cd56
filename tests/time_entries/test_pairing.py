from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from fichalia.core.enums import EntryType
from fichalia.time_entries.model import TimeEntry
from fichalia.time_entries.pairing import (
    daily_totals,
    format_duration,
    group_by_date,
    pair_entries,
    partition_by_subject,
    total_duration_minutes,
)

IN = EntryType.CHECK_IN
OUT = EntryType.CHECK_OUT


def entry(entry_id: str, kind: EntryType, when: datetime, subject_id: str = "u1") -> TimeEntry:
    return TimeEntry(id=entry_id, subject_id=subject_id, kind=kind, timestamp=when)


def at(day: int, hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2025, 3, day, hour, minute, second, tzinfo=timezone.utc)


def test_same_day_pair():
    sessions = pair_entries([entry("a", IN, at(10, 9)), entry("b", OUT, at(10, 17))])

    assert len(sessions) == 1
    s = sessions[0]
    assert s.date == "2025-03-10"
    assert s.check_out.id == "b"
    assert s.duration_minutes == 480
    assert s.spans_midnight is False
    assert s.in_progress is False


def test_overnight_pair_keeps_check_in_date():
    sessions = pair_entries([entry("a", IN, at(10, 22)), entry("b", OUT, at(11, 2))])

    assert len(sessions) == 1
    assert sessions[0].date == "2025-03-10"
    assert sessions[0].duration_minutes == 240
    assert sessions[0].spans_midnight is True


def test_lone_check_in_is_in_progress():
    sessions = pair_entries([entry("a", IN, at(10, 9))])

    assert len(sessions) == 1
    assert sessions[0].check_out is None
    assert sessions[0].duration_minutes is None
    assert sessions[0].spans_midnight is False
    assert format_duration(sessions[0].duration_minutes) == "En curso..."


def test_orphan_check_out_is_dropped():
    assert pair_entries([entry("a", OUT, at(10, 8))]) == []


def test_consecutive_check_ins_scan_past_each_other():
    sessions = pair_entries(
        [
            entry("in9", IN, at(10, 9)),
            entry("in10", IN, at(10, 10)),
            entry("out11", OUT, at(10, 11)),
        ]
    )

    assert [s.check_in.id for s in sessions] == ["in10", "in9"]
    latest, earliest = sessions
    assert latest.check_out is None
    assert earliest.check_out.id == "out11"
    assert earliest.duration_minutes == 120


def test_check_out_before_any_check_in_is_not_reused():
    sessions = pair_entries(
        [
            entry("o1", OUT, at(10, 7)),
            entry("i1", IN, at(10, 8)),
            entry("o2", OUT, at(10, 12)),
        ]
    )

    assert len(sessions) == 1
    assert sessions[0].check_out.id == "o2"


def test_scan_crosses_several_days():
    sessions = pair_entries([entry("i", IN, at(10, 9)), entry("o", OUT, at(13, 9))])

    assert sessions[0].duration_minutes == 3 * 24 * 60
    assert sessions[0].spans_midnight is True
    assert format_duration(sessions[0].duration_minutes) == "72:00"


def test_equal_timestamps_give_zero_duration():
    sessions = pair_entries([entry("i", IN, at(10, 9)), entry("o", OUT, at(10, 9))])

    assert sessions[0].check_out is not None
    assert sessions[0].duration_minutes == 0


def test_duration_rounds_half_up_to_minutes():
    half = pair_entries([entry("i", IN, at(10, 9)), entry("o", OUT, at(10, 9, 1, 30))])
    under = pair_entries([entry("i", IN, at(10, 9)), entry("o", OUT, at(10, 9, 1, 29))])

    assert half[0].duration_minutes == 2
    assert under[0].duration_minutes == 1


def test_sessions_are_most_recent_first():
    sessions = pair_entries(
        [
            entry("i1", IN, at(10, 9)),
            entry("o1", OUT, at(10, 13)),
            entry("i2", IN, at(11, 9)),
            entry("o2", OUT, at(11, 13)),
            entry("i3", IN, at(12, 9)),
        ]
    )

    assert [s.check_in.id for s in sessions] == ["i3", "i2", "i1"]


def test_input_is_not_reordered():
    items = [entry("o", OUT, at(10, 17)), entry("i", IN, at(10, 9))]
    snapshot = list(items)

    pair_entries(items)

    assert items == snapshot


def test_empty_input():
    assert pair_entries([]) == []
    assert group_by_date([]) == {}
    assert total_duration_minutes([]) == 0


def test_date_follows_display_timezone():
    madrid = ZoneInfo("Europe/Madrid")
    # 23:30 UTC on 1 Jan is 00:30 on 2 Jan in Madrid.
    check_in = datetime(2025, 1, 1, 23, 30, tzinfo=timezone.utc)
    items = [entry("i", IN, check_in), entry("o", OUT, check_in + timedelta(hours=2))]

    assert pair_entries(items)[0].date == "2025-01-01"
    local = pair_entries(items, tz=madrid)[0]
    assert local.date == "2025-01-02"
    assert local.spans_midnight is False


def _mixed_history() -> list[TimeEntry]:
    items = []
    for day in range(1, 15):
        items.append(entry(f"i{day}", IN, at(day, 8, day)))
        if day % 3:
            items.append(entry(f"o{day}", OUT, at(day, 16, day)))
        if day % 5 == 0:
            items.append(entry(f"x{day}", OUT, at(day, 20)))
            items.append(entry(f"j{day}", IN, at(day, 21)))
    return items


def test_pairing_is_idempotent_and_order_invariant():
    items = _mixed_history()
    expected = pair_entries(items)

    assert pair_entries(items) == expected
    rng = random.Random(7)
    for _ in range(5):
        shuffled = list(items)
        rng.shuffle(shuffled)
        assert pair_entries(shuffled) == expected


def test_each_check_out_closes_at_most_one_session():
    items = _mixed_history()
    sessions = pair_entries(items)

    closed = [s.check_out.id for s in sessions if s.check_out]
    ins = sum(1 for e in items if e.kind is IN)
    outs = sum(1 for e in items if e.kind is OUT)
    assert len(closed) == len(set(closed))
    assert len(closed) <= min(ins, outs)
    assert len(sessions) == ins
    assert all(s.duration_minutes >= 0 for s in sessions if s.check_out)


def test_total_duration_ignores_in_progress_sessions():
    sessions = pair_entries(
        [
            entry("i1", IN, at(10, 9)),
            entry("o1", OUT, at(10, 10, 30)),
            entry("i2", IN, at(11, 9)),
        ]
    )

    assert total_duration_minutes(sessions) == 90
    assert total_duration_minutes(sessions) == sum(s.duration_minutes or 0 for s in sessions)


def test_group_by_date_keeps_relative_order():
    sessions = pair_entries(
        [
            entry("a1", IN, at(10, 8)),
            entry("a2", OUT, at(10, 12)),
            entry("a3", IN, at(10, 13)),
            entry("a4", OUT, at(10, 17)),
            entry("b1", IN, at(11, 9)),
            entry("b2", OUT, at(11, 14)),
            entry("c1", IN, at(12, 9)),
        ]
    )

    grouped = group_by_date(sessions)

    assert list(grouped) == ["2025-03-12", "2025-03-11", "2025-03-10"]
    assert [s.check_in.id for s in grouped["2025-03-10"]] == ["a3", "a1"]
    assert [s.check_in.id for s in grouped["2025-03-11"]] == ["b1"]
    assert daily_totals(sessions) == {"2025-03-12": 0, "2025-03-11": 300, "2025-03-10": 480}


def test_partition_by_subject_keeps_first_seen_order():
    items = [
        entry("a", IN, at(10, 9), subject_id="u1"),
        entry("b", IN, at(10, 9), subject_id="u2"),
        entry("c", OUT, at(11, 17), subject_id="u1"),
    ]

    parts = partition_by_subject(items)
    assert list(parts) == ["u1", "u2"]
    assert [e.id for e in parts["u1"]] == ["a", "c"]


def test_format_duration():
    assert format_duration(None) == "En curso..."
    assert format_duration(0) == "00:00"
    assert format_duration(5) == "00:05"
    assert format_duration(480) == "08:00"
    assert format_duration(1500) == "25:00"
