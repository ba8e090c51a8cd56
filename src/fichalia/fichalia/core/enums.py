from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EntryType(str, Enum):
    """Kind of a time entry as stored in the database."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"

    @property
    def opposite(self) -> "EntryType":
        return EntryType.CHECK_OUT if self is EntryType.CHECK_IN else EntryType.CHECK_IN

    @property
    def label(self) -> str:
        return "Entrada" if self is EntryType.CHECK_IN else "Salida"
