from __future__ import annotations

from functools import wraps

from flask import g, jsonify, session

from .model import CurrentUser


def load_current_user() -> None:
    """``before_request`` hook: expose the session's auth state on ``g``."""
    g.current_user = CurrentUser.from_session(session)


def current_user() -> CurrentUser | None:
    return g.get("current_user")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return jsonify({"success": False, "message": "Inicia sesión para continuar"}), 401
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return jsonify({"success": False, "message": "Inicia sesión para continuar"}), 401
        if not user.is_admin:
            return jsonify({"success": False, "message": "Acceso restringido a administradores"}), 403
        return view(*args, **kwargs)

    return wrapper
