from __future__ import annotations

import logging
from dataclasses import asdict

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import DataAccessError, RecordNotFoundError, ValidationError
from .repository import UNSET

logger = logging.getLogger(__name__)


def _record_to_dict(r) -> dict:
    return {
        "record_id": r.record_id,
        "student_id": r.student_id,
        "schedule_id": r.schedule_id,
        "status": r.status.value,
        "service_time_id": r.service_time_id,
        "notes": r.notes,
        "date": r.date.strftime("%Y-%m-%d") if r.date else None,
    }


def _alert_to_dict(a) -> dict:
    return {
        "student_id": a.student_id,
        "absence_count": a.absence_count,
        "absence_dates": [d.strftime("%Y-%m-%d") for d in a.absence_dates],
        "first_absence_date": a.first_absence_date.strftime("%Y-%m-%d"),
        "last_absence_date": a.last_absence_date.strftime("%Y-%m-%d"),
    }


def register(app: Flask, container) -> None:
    service = container.attendance_service

    @app.errorhandler(ValidationError)
    def handle_validation(e: ValidationError):
        return jsonify({"success": False, "message": str(e)}), 400

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(e: RecordNotFoundError):
        return jsonify({"success": False, "message": str(e)}), 404

    @app.errorhandler(DataAccessError)
    def handle_data_access(e: DataAccessError):
        logger.error("Data access failed: %s", e)
        return jsonify({"success": False, "message": "Backend unavailable"}), 503

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Expected a JSON object body")
        return data

    @app.route("/api/students/<int:student_id>/attendance", methods=["GET"], endpoint="student_attendance")
    def student_attendance(student_id: int):
        summary = service.student_summary(student_id)
        return jsonify(service.summary_to_ui(summary))

    @app.route("/api/schedules/<int:schedule_id>/stats", methods=["GET"], endpoint="schedule_stats")
    def schedule_stats(schedule_id: int):
        return jsonify(asdict(service.schedule_stats(schedule_id)))

    @app.route("/api/attendance", methods=["PUT"], endpoint="mark_attendance")
    def mark_attendance():
        data = _json_body()
        record = service.mark(
            data.get("student_id"),
            data.get("schedule_id"),
            data.get("status"),
            notes=data.get("notes"),
            service_time_id=data.get("service_time_id"),
        )
        return jsonify({"success": True, "record": _record_to_dict(record)})

    @app.route("/api/attendance/<int:record_id>", methods=["PATCH"], endpoint="edit_attendance")
    def edit_attendance(record_id: int):
        data = _json_body()
        record = service.edit_record(
            record_id,
            data.get("student_id"),
            status=data.get("status"),
            notes=data["notes"] if "notes" in data else UNSET,
        )
        return jsonify({"success": True, "record": _record_to_dict(record)})

    @app.route("/api/attendance/<int:record_id>", methods=["DELETE"], endpoint="delete_attendance")
    def delete_attendance(record_id: int):
        student_id = request.args.get("student_id", type=int)
        record = service.remove_record(record_id, student_id)
        return jsonify({"success": True, "record": _record_to_dict(record)})

    @app.route("/api/absence-alerts", methods=["GET"], endpoint="absence_alerts")
    def absence_alerts():
        before_s = request.args.get("before")
        try:
            before = parse_iso_date(before_s) if before_s else None
        except ValueError:
            raise ValidationError(f"Invalid date: {before_s!r}") from None
        alerts = service.roster_alerts(before=before)
        return jsonify({"alerts": [_alert_to_dict(a) for a in alerts]})
