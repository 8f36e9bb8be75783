from __future__ import annotations

import csv
import io
from datetime import timedelta
from functools import wraps

from flask import Flask, request, session

from ..common.datetime_utils import start_of_day
from ..common.envelope import success
from ..container import Container
from ..core.constants import DEFAULT_SUMMARY_DAYS
from ..core.exceptions import ValidationError
from ..employees.identity import identity_from_session
from ..reports.service import REPORT_FIELDS, ReportData
from .payloads import (
    AddTaskRequest,
    CheckInRequest,
    CheckOutRequest,
    EndBreakRequest,
    HistoryQuery,
    MonthQuery,
    StartBreakRequest,
    UpdateTaskRequest,
    parse_query_date,
)
from .serialization import record_to_dict, task_to_dict


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    stats = container.stats_service

    def login_required(view):
        """Resolve the session identity and pass it as the first argument."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            return view(identity_from_session(session), *args, **kwargs)

        return wrapper

    def _json_body():
        return request.get_json(silent=True)

    def _write_report_csv(*, data: ReportData, filename: str):
        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in data.rows:
            writer.writerow(row)

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def check_in(identity):
        payload = CheckInRequest.from_json(_json_body())
        record = attendance.check_in(
            identity,
            now=payload.timestamp,
            location=payload.location,
            device_info=payload.device_info,
            shift_id=payload.shift_id,
            scheduled_start=payload.scheduled_start,
            scheduled_end=payload.scheduled_end,
        )
        message = "Checked in late" if record.last_check_in.is_late else "Checked in successfully"
        return success(message, record_to_dict(record), status=201)

    @app.route("/api/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def check_out(identity):
        payload = CheckOutRequest.from_json(_json_body())
        record = attendance.check_out(
            identity.employee_id,
            now=payload.timestamp,
            location=payload.location,
            tasks=payload.tasks,
            device_info=payload.device_info,
        )
        return success("Checked out successfully", record_to_dict(record))

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="attendance_break_start")
    @login_required
    def break_start(identity):
        payload = StartBreakRequest.from_json(_json_body())
        record, break_id = attendance.start_break(
            identity.employee_id,
            break_type=payload.break_type,
            namaz_type=payload.namaz_type,
            reason=payload.reason,
        )
        label = "Prayer break" if payload.namaz_type else "Break"
        return success(f"{label} started", {"breakId": break_id, "attendance": record_to_dict(record)}, status=201)

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="attendance_break_end")
    @login_required
    def break_end(identity):
        payload = EndBreakRequest.from_json(_json_body())
        record = attendance.end_break(identity.employee_id, payload.break_id, end=payload.end)
        return success("Break ended", record_to_dict(record))

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today(identity):
        record = attendance.today_view(identity)
        return success("Today's attendance", record_to_dict(record))

    @app.route("/api/attendance/quick-status", methods=["GET"], endpoint="attendance_quick_status")
    @login_required
    def quick_status(identity):
        return success("Quick status", attendance.quick_status(identity.employee_id).to_dict())

    @app.route("/api/attendance/history", methods=["GET"], endpoint="attendance_history")
    @login_required
    def history(identity):
        query = HistoryQuery.from_args(request.args)
        page = attendance.history(
            identity.employee_id,
            page=query.page,
            limit=query.limit,
            start_date=query.start_date,
            end_date=query.end_date,
        )
        return success(
            "Attendance history",
            {
                "records": [record_to_dict(r) for r in page.records],
                "pagination": {"page": page.page, "limit": page.limit, "total": page.total, "pages": page.pages},
            },
        )

    @app.route("/api/attendance/history.csv", methods=["GET"], endpoint="attendance_history_csv")
    @login_required
    def history_csv(identity):
        today = start_of_day(attendance.clock())
        end = parse_query_date(request.args.get("endDate"), "endDate") or today
        start = parse_query_date(request.args.get("startDate"), "startDate") or end - timedelta(
            days=DEFAULT_SUMMARY_DAYS - 1
        )

        data = stats.build_history_report(identity.employee_id, start=start, end=end)
        filename = f"attendance_{identity.employee_id}_{start.strftime('%Y%m%d')}_{end.strftime('%Y%m%d')}.csv"
        return _write_report_csv(data=data, filename=filename)

    @app.route("/api/attendance/monthly", methods=["GET"], endpoint="attendance_monthly")
    @login_required
    def monthly(identity):
        query = MonthQuery.from_args(request.args)
        month_stats = stats.monthly_stats(identity.employee_id, year=query.year, month=query.month)
        today = start_of_day(attendance.clock())
        year = query.year or today.year
        month = query.month or today.month
        records = attendance.monthly_records(identity.employee_id, year, month)
        return success(
            "Monthly attendance",
            {
                "year": year,
                "month": month,
                "records": [record_to_dict(r) for r in records],
                "stats": month_stats.to_dict(),
            },
        )

    @app.route("/api/attendance/summary", methods=["GET"], endpoint="attendance_summary")
    @login_required
    def summary(identity):
        start = parse_query_date(request.args.get("startDate"), "startDate")
        end = parse_query_date(request.args.get("endDate"), "endDate")
        result = stats.summary(identity.employee_id, start_date=start, end_date=end)
        return success("Attendance summary", result.to_dict())

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    @login_required
    def stats_bundle(identity):
        return success("Attendance statistics", stats.stats_bundle(identity.employee_id).to_dict())

    @app.route("/api/attendance/tasks", methods=["POST"], endpoint="attendance_task_add")
    @login_required
    def task_add(identity):
        payload = AddTaskRequest.from_json(_json_body())
        record, task = attendance.add_task(
            identity,
            description=payload.description,
            time_allocated=payload.time_allocated,
            priority=payload.priority,
        )
        return success("Task added", {"task": task_to_dict(task), "attendance": record_to_dict(record)}, status=201)

    @app.route("/api/attendance/tasks", methods=["PUT"], endpoint="attendance_task_update")
    @login_required
    def task_update(identity):
        payload = UpdateTaskRequest.from_json(_json_body())
        record, task = attendance.update_task(
            identity.employee_id,
            payload.task_id,
            time_spent=payload.time_spent,
            completed=payload.completed,
        )
        return success("Task updated", {"task": task_to_dict(task), "attendance": record_to_dict(record)})

    @app.route("/api/attendance/tasks", methods=["DELETE"], endpoint="attendance_task_delete")
    @login_required
    def task_delete(identity):
        task_id = request.args.get("taskId")
        if not task_id:
            raise ValidationError("taskId is required")
        record = attendance.delete_task(identity.employee_id, task_id)
        return success("Task deleted", record_to_dict(record))

    @app.route("/api/attendance/shifts", methods=["GET"], endpoint="attendance_shifts")
    @login_required
    def shift_catalogue(identity):
        shifts = [
            {
                "id": s.shift_id,
                "name": s.shift_name,
                "startTime": s.start_time.strftime("%H:%M"),
                "endTime": s.end_time.strftime("%H:%M"),
                "isNightShift": s.is_night_shift,
            }
            for s in container.shifts_repo.list_all()
        ]
        return success("Shifts", shifts)
