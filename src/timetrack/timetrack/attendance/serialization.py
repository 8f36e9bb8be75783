"""Dict <-> domain conversion for attendance records.

The same camelCase shape is used for API responses and for the JSON
columns that hold the embedded collections.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus, BreakType, NamazType, OvertimeStatus, TaskPriority
from .model import (
    AttendanceRecord,
    Break,
    CheckInEvent,
    CheckOutEvent,
    GeoLocation,
    NamazBreak,
    Overtime,
    Task,
)

STATUS_LABELS = {
    AttendanceStatus.PRESENT: "Present",
    AttendanceStatus.LATE: "Late",
    AttendanceStatus.EARLY_DEPARTURE: "Early departure",
    AttendanceStatus.ABSENT: "Absent",
}


def status_label(status: AttendanceStatus) -> str:
    return STATUS_LABELS.get(status, status.value)


def _iso(value: Optional[datetime | date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def location_to_dict(loc: Optional[GeoLocation]) -> Optional[dict[str, Any]]:
    if loc is None:
        return None
    return {
        "latitude": loc.latitude,
        "longitude": loc.longitude,
        "accuracy": loc.accuracy,
        "address": loc.address,
    }


def location_from_dict(data: Optional[dict[str, Any]]) -> Optional[GeoLocation]:
    if not data:
        return None
    return GeoLocation(
        latitude=data["latitude"],
        longitude=data["longitude"],
        accuracy=data.get("accuracy"),
        address=data.get("address"),
    )


def check_in_to_dict(event: CheckInEvent) -> dict[str, Any]:
    return {
        "timestamp": _iso(event.timestamp),
        "location": location_to_dict(event.location),
        "isLate": event.is_late,
        "lateMinutes": event.late_minutes,
        "deviceInfo": event.device_info,
    }


def check_in_from_dict(data: dict[str, Any]) -> CheckInEvent:
    return CheckInEvent(
        timestamp=_dt(data["timestamp"]),
        location=location_from_dict(data.get("location")),
        is_late=bool(data.get("isLate", False)),
        late_minutes=int(data.get("lateMinutes", 0)),
        device_info=data.get("deviceInfo") or "",
    )


def check_out_to_dict(event: CheckOutEvent) -> dict[str, Any]:
    return {
        "timestamp": _iso(event.timestamp),
        "location": location_to_dict(event.location),
        "isEarly": event.is_early,
        "earlyMinutes": event.early_minutes,
        "tasksCompleted": event.tasks_completed,
        "deviceInfo": event.device_info,
    }


def check_out_from_dict(data: dict[str, Any]) -> CheckOutEvent:
    return CheckOutEvent(
        timestamp=_dt(data["timestamp"]),
        location=location_from_dict(data.get("location")),
        is_early=bool(data.get("isEarly", False)),
        early_minutes=int(data.get("earlyMinutes", 0)),
        tasks_completed=bool(data.get("tasksCompleted", False)),
        device_info=data.get("deviceInfo") or "",
    )


def break_to_dict(item: Break) -> dict[str, Any]:
    return {
        "id": item.break_id,
        "type": item.break_type.value,
        "start": _iso(item.start),
        "end": _iso(item.end),
        "isActive": item.is_active,
        "reason": item.reason,
        "duration": item.duration_minutes,
    }


def break_from_dict(data: dict[str, Any]) -> Break:
    return Break(
        break_id=data["id"],
        break_type=BreakType(data.get("type") or BreakType.GENERAL.value),
        start=_dt(data["start"]),
        end=_dt(data.get("end")),
        reason=data.get("reason"),
    )


def namaz_break_to_dict(item: NamazBreak) -> dict[str, Any]:
    return {
        "id": item.break_id,
        "namazType": item.namaz_type.value,
        "start": _iso(item.start),
        "end": _iso(item.end),
        "isActive": item.is_active,
        "duration": item.duration_minutes,
    }


def namaz_break_from_dict(data: dict[str, Any]) -> NamazBreak:
    return NamazBreak(
        break_id=data["id"],
        namaz_type=NamazType(data["namazType"]),
        start=_dt(data["start"]),
        end=_dt(data.get("end")),
    )


def task_to_dict(task: Task) -> dict[str, Any]:
    return {
        "id": task.task_id,
        "description": task.description,
        "timeAllocated": task.time_allocated,
        "timeSpent": task.time_spent,
        "priority": task.priority.value,
        "completed": task.completed,
        "completedAt": _iso(task.completed_at),
        "createdAt": _iso(task.created_at),
        "updatedAt": _iso(task.updated_at),
    }


def task_from_dict(data: dict[str, Any]) -> Task:
    return Task(
        task_id=data["id"],
        description=data["description"],
        time_allocated=data.get("timeAllocated"),
        time_spent=data.get("timeSpent") or 0,
        priority=TaskPriority(data.get("priority") or TaskPriority.MEDIUM.value),
        completed=bool(data.get("completed", False)),
        completed_at=_dt(data.get("completedAt")),
        created_at=_dt(data.get("createdAt")),
        updated_at=_dt(data.get("updatedAt")),
    )


def overtime_to_dict(overtime: Optional[Overtime]) -> Optional[dict[str, Any]]:
    if overtime is None:
        return None
    return {
        "overtimeHours": overtime.overtime_hours,
        "reason": overtime.reason,
        "status": overtime.status.value,
        "createdAt": _iso(overtime.created_at),
    }


def overtime_from_dict(data: Optional[dict[str, Any]]) -> Optional[Overtime]:
    if not data:
        return None
    return Overtime(
        overtime_hours=float(data.get("overtimeHours") or 0),
        reason=data.get("reason") or "",
        status=OvertimeStatus(data.get("status") or OvertimeStatus.PENDING.value),
        created_at=_dt(data.get("createdAt")),
    )


def record_to_dict(record: AttendanceRecord) -> dict[str, Any]:
    return {
        "id": record.record_id,
        "employeeId": record.employee_id,
        "employeeName": record.employee_name,
        "employeeEmail": record.employee_email,
        "employeeMobile": record.employee_mobile,
        "date": _iso(record.work_date),
        "shift": {
            "shiftId": record.shift_id,
            "shiftName": record.shift_name,
            "scheduledStart": _iso(record.scheduled_start),
            "scheduledEnd": _iso(record.scheduled_end),
        },
        "checkIns": [check_in_to_dict(e) for e in record.check_ins],
        "checkOuts": [check_out_to_dict(e) for e in record.check_outs],
        "breaks": [break_to_dict(b) for b in record.breaks],
        "namazBreaks": [namaz_break_to_dict(b) for b in record.namaz_breaks],
        "tasks": [task_to_dict(t) for t in record.tasks],
        "status": record.status.value,
        "statusLabel": status_label(record.status),
        "checkInTime": _iso(record.check_in_time),
        "checkOutTime": _iso(record.check_out_time),
        "totalWorkingHours": record.total_working_hours,
        "lateMinutes": record.late_minutes,
        "earlyDepartureMinutes": record.early_departure_minutes,
        "overtime": overtime_to_dict(record.overtime),
        "version": record.version,
        "createdAt": _iso(record.created_at),
        "updatedAt": _iso(record.updated_at),
    }


def record_from_dict(data: dict[str, Any]) -> AttendanceRecord:
    shift = data.get("shift") or {}
    return AttendanceRecord(
        record_id=data.get("id"),
        employee_id=data["employeeId"],
        employee_name=data.get("employeeName") or "",
        employee_email=data.get("employeeEmail") or "",
        employee_mobile=data.get("employeeMobile") or "",
        work_date=date.fromisoformat(data["date"]),
        shift_id=shift.get("shiftId") or "",
        shift_name=shift.get("shiftName") or "",
        scheduled_start=_dt(shift.get("scheduledStart")),
        scheduled_end=_dt(shift.get("scheduledEnd")),
        check_ins=[check_in_from_dict(e) for e in data.get("checkIns") or []],
        check_outs=[check_out_from_dict(e) for e in data.get("checkOuts") or []],
        breaks=AttendanceRecord.breaks_of([break_from_dict(b) for b in data.get("breaks") or []]),
        namaz_breaks=AttendanceRecord.namaz_breaks_of(
            [namaz_break_from_dict(b) for b in data.get("namazBreaks") or []]
        ),
        tasks=AttendanceRecord.tasks_of([task_from_dict(t) for t in data.get("tasks") or []]),
        status=AttendanceStatus(data.get("status") or AttendanceStatus.ABSENT.value),
        total_working_hours=float(data.get("totalWorkingHours") or 0),
        late_minutes=int(data.get("lateMinutes") or 0),
        early_departure_minutes=int(data.get("earlyDepartureMinutes") or 0),
        overtime=overtime_from_dict(data.get("overtime")),
        version=int(data.get("version") or 0),
        created_at=_dt(data.get("createdAt")),
        updated_at=_dt(data.get("updatedAt")),
    )
