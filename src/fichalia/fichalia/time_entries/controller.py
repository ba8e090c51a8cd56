from __future__ import annotations

import io
import logging

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import (
    last_n_days_range,
    month_range,
    parse_iso_date,
    today_in,
    week_range,
)
from ..common.validators import optional_float, optional_text
from ..core.constants import ADDRESS_MAX_LENGTH, DEFAULT_HISTORY_DAYS
from ..core.enums import EntryType
from ..core.exceptions import ValidationError
from ..profiles.guards import admin_required, current_user, login_required
from . import export
from .model import DateRange, Location, Session
from .pairing import format_duration

logger = logging.getLogger(__name__)

_PRESETS = {
    "today": lambda today: (today, today),
    "week": week_range,
    "month": month_range,
    "last7": lambda today: last_n_days_range(today, 7),
    "last30": lambda today: last_n_days_range(today, 30),
}


def register(app: Flask, container) -> None:
    tz = container.tz

    def _date_range() -> DateRange:
        start = request.args.get("start")
        end = request.args.get("end")
        today = today_in(tz)

        if start or end:
            start_date = parse_iso_date(start) if start else today
            end_date = parse_iso_date(end) if end else today
        else:
            preset = request.args.get("range")
            if preset and preset not in _PRESETS:
                raise ValidationError(f"Rango no válido: {preset}")
            if preset:
                start_date, end_date = _PRESETS[preset](today)
            else:
                start_date, end_date = last_n_days_range(today, DEFAULT_HISTORY_DAYS)

        if start_date > end_date:
            raise ValidationError("La fecha de inicio es posterior a la de fin")
        return DateRange(start=start_date, end=end_date)

    def _csv_response(text: str, filename: str):
        # send_file adds an ASCII filename plus filename* for non-ASCII names.
        return send_file(
            io.BytesIO(text.encode("utf-8-sig")),
            mimetype="text/csv",
            as_attachment=True,
            download_name=filename,
        )

    def _session_json(s: Session) -> dict:
        data = container.time_entry_service.session_to_ui(s)
        data["check_in_id"] = s.check_in.id
        data["check_out_id"] = s.check_out.id if s.check_out else None
        return data

    @app.route("/api/time-entries", methods=["POST"], endpoint="record_entry")
    @login_required
    def record_entry():
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise ValidationError("Cuerpo de la petición no válido")
        latitude = optional_float(data.get("latitude"), "Latitud")
        longitude = optional_float(data.get("longitude"), "Longitud")
        address = optional_text(data.get("address"), "Dirección", max_length=ADDRESS_MAX_LENGTH)
        location = Location(latitude, longitude, address) if (latitude is not None or longitude is not None or address) else None

        user_id = current_user().user_id
        kind = data.get("kind")
        if kind:
            try:
                entry_type = EntryType(kind)
            except ValueError:
                raise ValidationError(f"Tipo de fichaje no válido: {kind}") from None
            entry = container.time_entry_service.record(user_id, entry_type, location=location)
        else:
            entry = container.time_entry_service.toggle(user_id, location=location)

        message = "Entrada registrada" if entry.is_check_in else "Salida registrada"
        return (
            jsonify(
                {
                    "success": True,
                    "message": message,
                    "entry": {
                        "id": entry.id,
                        "kind": entry.kind.value,
                        "timestamp": entry.timestamp.isoformat(),
                    },
                }
            ),
            201,
        )

    @app.route("/api/time-entries/status", methods=["GET"], endpoint="entry_status")
    @login_required
    def entry_status():
        status = container.time_entry_service.current_status(current_user().user_id)
        return jsonify({"success": True, "status": status.value if status else None, "checked_in": status is EntryType.CHECK_IN})

    @app.route("/api/sessions", methods=["GET"], endpoint="my_sessions")
    @login_required
    def my_sessions():
        date_range = _date_range()
        user_id = current_user().user_id
        service = container.time_entry_service
        sheet = service.get_timesheet(user_id, date_range=date_range)
        start, end = date_range.as_strings()
        return jsonify(
            {
                "success": True,
                "start": start,
                "end": end,
                "total": format_duration(sheet.total_minutes),
                "total_minutes": sheet.total_minutes,
                "history": service.timesheet_history(sheet),
            }
        )

    @app.route("/api/admin/timesheets", methods=["GET"], endpoint="admin_timesheets")
    @admin_required
    def admin_timesheets():
        date_range = _date_range()
        subject_id = request.args.get("user") or None
        sheets = container.time_entry_service.get_all_timesheets(date_range=date_range, subject_id=subject_id)
        start, end = date_range.as_strings()
        return jsonify(
            {
                "success": True,
                "start": start,
                "end": end,
                "employees": [
                    {
                        "user_id": sheet.subject_id,
                        "full_name": sheet.full_name,
                        "email": sheet.email,
                        "total": format_duration(sheet.total_minutes),
                        "total_minutes": sheet.total_minutes,
                        "sessions": [_session_json(s) for s in sheet.sessions],
                    }
                    for sheet in sheets
                ],
            }
        )

    @app.route("/me/entries.csv", methods=["GET"], endpoint="my_entries_csv")
    @login_required
    def my_entries_csv():
        date_range = _date_range()
        user = current_user()
        entries = container.time_entry_service.get_entries(user.user_id, date_range=date_range)
        logger.info("User %s exported %d entries", user.user_id, len(entries))
        return _csv_response(
            export.employee_entries_csv(entries, tz=tz),
            export.employee_filename(user.full_name, date_range),
        )

    @app.route("/admin/entries.csv", methods=["GET"], endpoint="admin_entries_csv")
    @admin_required
    def admin_entries_csv():
        date_range = _date_range()
        subject_id = request.args.get("user") or None
        entries = container.time_entry_service.get_entries(subject_id, date_range=date_range)
        profiles = {p.id: p for p in container.profiles_repo.list_active()}
        return _csv_response(
            export.entries_csv(entries, profiles, tz=tz),
            export.entries_filename(date_range),
        )

    @app.route("/admin/timesheets.csv", methods=["GET"], endpoint="admin_timesheets_csv")
    @admin_required
    def admin_timesheets_csv():
        date_range = _date_range()
        subject_id = request.args.get("user") or None
        sheets = container.time_entry_service.get_all_timesheets(date_range=date_range, subject_id=subject_id)
        return _csv_response(export.timesheet_csv(sheets, tz=tz), export.timesheet_filename(date_range))
