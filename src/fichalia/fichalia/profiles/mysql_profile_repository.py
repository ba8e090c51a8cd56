from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import ensure_aware
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Profile
from .repository import ProfileRepository

_COLUMNS = "id, email, full_name, role, active, password_hash, created_at"


def _row_to_profile(r: dict) -> Profile:
    created_at = r.get("created_at")
    return Profile(
        id=str(r["id"]),
        email=r["email"],
        full_name=r["full_name"],
        role=Role(r["role"]),
        active=bool(r.get("active", 1)),
        password_hash=r.get("password_hash") or "",
        created_at=ensure_aware(created_at) if created_at else None,
    )


class MySQLProfileRepository(ProfileRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE id=%s", (profile_id,))
            r = fetchone(cur)
            return _row_to_profile(r) if r else None

    def get_by_email(self, email: str) -> Optional[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM profiles WHERE email=%s", (email.strip().lower(),))
            r = fetchone(cur)
            return _row_to_profile(r) if r else None

    def list_active(self) -> Sequence[Profile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM profiles
                WHERE active=1
                ORDER BY full_name ASC
                """
            )
            return [_row_to_profile(r) for r in fetchall(cur)]
