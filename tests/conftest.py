from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import pytest
from werkzeug.security import generate_password_hash

from fichalia.common.datetime_utils import day_bounds, ensure_aware
from fichalia.container import build_services
from fichalia.core.enums import EntryType, Role
from fichalia.main import create_app
from fichalia.profiles.model import Profile
from fichalia.time_entries.model import Location, TimeEntry

MADRID = ZoneInfo("Europe/Madrid")


@dataclass
class InMemoryProfiles:
    by_id: dict[str, Profile] = field(default_factory=dict)

    def add(self, profile: Profile) -> Profile:
        self.by_id[profile.id] = profile
        return profile

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        return self.by_id.get(profile_id)

    def get_by_email(self, email: str) -> Optional[Profile]:
        for p in self.by_id.values():
            if p.email == email:
                return p
        return None

    def list_active(self):
        return sorted((p for p in self.by_id.values() if p.active), key=lambda p: p.full_name)


class InMemoryTimeEntries:
    def __init__(self, tz=None):
        self.items: list[TimeEntry] = []
        self._id = 0
        self._tz = tz

    def add(self, subject_id: str, kind: EntryType, timestamp: datetime, location: Optional[Location] = None) -> TimeEntry:
        self._id += 1
        entry = TimeEntry(id=f"e{self._id}", subject_id=subject_id, kind=kind, timestamp=timestamp, location=location)
        self.items.append(entry)
        return entry

    def create(self, *, subject_id: str, kind: EntryType, timestamp: datetime, location=None) -> str:
        return self.add(subject_id, kind, timestamp, location).id

    def list_entries(self, *, subject_id=None, start: Optional[date] = None, end: Optional[date] = None):
        items = [e for e in self.items if subject_id is None or e.subject_id == subject_id]
        if start is not None:
            lower, _ = day_bounds(start, start, self._tz)
            items = [e for e in items if ensure_aware(e.timestamp) >= lower]
        if end is not None:
            _, upper = day_bounds(end, end, self._tz)
            items = [e for e in items if ensure_aware(e.timestamp) < upper]
        # Newest first; ties keep the latest insert first, like ORDER BY timestamp DESC, seq DESC.
        seq = {e.id: i for i, e in enumerate(self.items)}
        return sorted(items, key=lambda e: (ensure_aware(e.timestamp), seq[e.id]), reverse=True)

    def get_last_for_subject(self, subject_id: str) -> Optional[TimeEntry]:
        items = self.list_entries(subject_id=subject_id)
        return items[0] if items else None


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def profiles() -> InMemoryProfiles:
    repo = InMemoryProfiles()
    repo.add(
        Profile(
            id="u-ana",
            email="ana@example.com",
            full_name="Ana García",
            role=Role.EMPLOYEE,
            password_hash=generate_password_hash("secreto1"),
        )
    )
    repo.add(
        Profile(
            id="u-luis",
            email="luis@example.com",
            full_name="Luis Pérez",
            role=Role.EMPLOYEE,
            password_hash=generate_password_hash("secreto2"),
        )
    )
    repo.add(
        Profile(
            id="u-admin",
            email="admin@example.com",
            full_name="Admin",
            role=Role.ADMIN,
            password_hash=generate_password_hash("admin123"),
        )
    )
    repo.add(Profile(id="u-old", email="old@example.com", full_name="Baja", role=Role.EMPLOYEE, active=False))
    return repo


@pytest.fixture
def time_entries() -> InMemoryTimeEntries:
    return InMemoryTimeEntries(tz=MADRID)


@pytest.fixture
def container(profiles, time_entries):
    return build_services(profiles_repo=profiles, time_entries_repo=time_entries, tz=MADRID)


@pytest.fixture
def app(container):
    return create_app(container=container, settings_module="config.testing")


@pytest.fixture
def client(app):
    return app.test_client()
