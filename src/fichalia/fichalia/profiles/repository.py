from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Profile


class ProfileRepository(Protocol):
    """Read-only profile lookups.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, profile_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Profile]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Profile]:
        raise NotImplementedError
