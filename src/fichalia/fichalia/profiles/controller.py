from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, g, jsonify, request, session

from ..core.exceptions import AuthenticationError, ValidationError
from .guards import current_user, load_current_user, login_required

logger = logging.getLogger(__name__)


def register(app: Flask, container) -> None:
    app.before_request(load_current_user)

    @app.route("/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or request.form
        email = data.get("email", "")
        password = data.get("password", "")
        remember = bool(data.get("remember_me"))

        try:
            user = container.auth_service.authenticate(email, password)
        except (AuthenticationError, ValidationError) as e:
            return jsonify({"success": False, "message": str(e)}), 401

        session.clear()
        session.permanent = remember
        app.permanent_session_lifetime = timedelta(days=7)
        session.update(user.to_session())
        g.current_user = user
        return jsonify({"success": True, "user": user.to_session()})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        user = current_user()
        session.clear()
        g.current_user = None
        if user:
            logger.info("User %s signed out", user.user_id)
        return jsonify({"success": True})

    @app.route("/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        user = current_user()
        status = container.time_entry_service.current_status(user.user_id)
        return jsonify(
            {
                "success": True,
                "user": user.to_session(),
                "status": status.value if status else None,
            }
        )
