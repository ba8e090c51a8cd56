from __future__ import annotations

import logging

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.exceptions import AuthenticationError
from .model import CurrentUser
from .repository import ProfileRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Use case: authenticate a profile (login)."""

    def __init__(self, profiles: ProfileRepository):
        self._profiles = profiles

    def authenticate(self, email: str, password: str) -> CurrentUser:
        email = require_non_empty(email or "", "Email").lower()
        profile = self._profiles.get_by_email(email)
        if not profile or not profile.active:
            logger.warning("Login rejected for %s: unknown or inactive", email)
            raise AuthenticationError("Email o contraseña incorrectos")

        try:
            ok = check_password_hash(profile.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            logger.warning("Login rejected for %s: bad password", email)
            raise AuthenticationError("Email o contraseña incorrectos")

        logger.info("User %s signed in", profile.id)
        return CurrentUser(
            user_id=profile.id,
            email=profile.email,
            full_name=profile.full_name,
            role=profile.role,
        )
