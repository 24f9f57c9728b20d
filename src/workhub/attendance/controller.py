from __future__ import annotations

import csv
import io

from flask import Flask, request

from ..common.datetime_utils import iso
from ..common.http import current_user_id, json_body, login_required, ok
from ..container import Container
from .model import AttendanceRecord
from .report import CSV_FIELDS


def attendance_json(r: AttendanceRecord | None) -> dict | None:
    if r is None:
        return None
    return {
        "id": r.attendance_id,
        "user_id": r.user_id,
        "date": iso(r.work_date),
        "check_in": iso(r.check_in_time),
        "check_out": iso(r.check_out_time),
        "status": r.status.value,
        "total_hours": r.total_hours,
        "overtime_hours": r.overtime_hours,
        "note": r.note,
    }


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    reports = container.attendance_report_service

    def _write_csv(rows, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        return ok(attendance_json(attendance.today(current_user_id())))

    @app.route("/api/attendance/check_in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in():
        record = attendance.check_in(current_user_id())
        return ok(attendance_json(record), message="Checked in", status=201)

    @app.route("/api/attendance/check_out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out():
        record = attendance.check_out(current_user_id())
        return ok(attendance_json(record), message="Checked out")

    @app.route("/api/attendance", methods=["PUT", "PATCH"], endpoint="attendance_update")
    @login_required
    def attendance_update():
        data = json_body()
        payload = data["attendance"] if isinstance(data.get("attendance"), dict) else data
        return ok(attendance_json(attendance.update_record(actor_id=current_user_id(), data=payload)))

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        data = reports.history(
            user_id=current_user_id(),
            period=request.args.get("period"),
            start=request.args.get("start_date"),
            end=request.args.get("end_date"),
        )
        return ok(data)

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def attendance_summary():
        data = reports.summary(
            user_id=current_user_id(),
            start=request.args.get("start_date"),
            end=request.args.get("end_date"),
        )
        return ok(data)

    @app.route("/api/attendance/export.csv", methods=["GET"], endpoint="attendance_export_csv")
    @login_required
    def attendance_export_csv():
        user_id = current_user_id()
        start, end = reports.resolve_range(request.args.get("start_date"), request.args.get("end_date"))
        return _write_csv(reports.daily_rows(user_id, start, end), reports.csv_filename(user_id, start, end))
