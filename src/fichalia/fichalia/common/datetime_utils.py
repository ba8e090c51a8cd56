from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from ..core.constants import DATE_FORMAT_INPUT
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, DATE_FORMAT_INPUT).date()
    except (TypeError, ValueError):
        raise ValidationError(f"Fecha no válida: {value!r}") from None


def ensure_aware(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (storage keeps instants in UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 instant (``Z`` suffix accepted) into an aware datetime."""
    if isinstance(value, datetime):
        return ensure_aware(value)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Marca de tiempo no válida: {value!r}")

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return ensure_aware(datetime.fromisoformat(text))
    except ValueError:
        raise ValidationError(f"Marca de tiempo no válida: {value!r}") from None


def to_local(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    value = ensure_aware(value)
    return value.astimezone(tz) if tz is not None else value


def local_date_key(value: datetime, tz: Optional[tzinfo] = None) -> str:
    """Calendar date of an instant in the display timezone, as YYYY-MM-DD."""
    return to_local(value, tz).strftime(DATE_FORMAT_INPUT)


def now_utc() -> datetime:
    """Current instant.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)


def today_in(tz: Optional[tzinfo] = None) -> date:
    return to_local(now_utc(), tz).date()


def day_bounds(start: date, end: date, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
    """Half-open [start 00:00, day after end 00:00) window as aware datetimes.

    Callers compare with ``>=`` the lower bound and ``<`` the upper one so
    sub-second timestamps late on the end day are included.
    """
    tz = tz or timezone.utc
    return (
        datetime.combine(start, time.min, tzinfo=tz),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=tz),
    )


def week_range(today: date) -> tuple[date, date]:
    # Weeks start on Monday.
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)


def month_range(today: date) -> tuple[date, date]:
    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    return start, next_month - timedelta(days=1)


def last_n_days_range(today: date, days: int) -> tuple[date, date]:
    return today - timedelta(days=int(days)), today
