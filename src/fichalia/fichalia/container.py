from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from .core.constants import DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .profiles.mysql_profile_repository import MySQLProfileRepository
from .profiles.repository import ProfileRepository
from .profiles.service import AuthService
from .time_entries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .time_entries.repository import TimeEntryRepository
from .time_entries.service import TimeEntryService


@dataclass(frozen=True)
class Container:
    tz: tzinfo

    profiles_repo: ProfileRepository
    time_entries_repo: TimeEntryRepository

    auth_service: AuthService
    time_entry_service: TimeEntryService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    profiles_repo: ProfileRepository,
    time_entries_repo: TimeEntryRepository,
    tz: tzinfo,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    return Container(
        tz=tz,
        profiles_repo=profiles_repo,
        time_entries_repo=time_entries_repo,
        auth_service=AuthService(profiles_repo),
        time_entry_service=TimeEntryService(time_entries_repo, profiles_repo, tz=tz),
        conn=conn,
    )


def build_container(*, db_config: dict, timezone_name: str = DEFAULT_TIMEZONE) -> Container:
    tz = ZoneInfo(timezone_name)
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_services(
        profiles_repo=MySQLProfileRepository(conn),
        time_entries_repo=MySQLTimeEntryRepository(conn, tz=tz),
        tz=tz,
        conn=conn,
    )
