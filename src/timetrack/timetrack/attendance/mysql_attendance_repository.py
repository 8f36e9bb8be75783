from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConcurrentUpdateError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_json, fetchall, fetchone, load_json
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .serialization import (
    break_from_dict,
    break_to_dict,
    check_in_from_dict,
    check_in_to_dict,
    check_out_from_dict,
    check_out_to_dict,
    namaz_break_from_dict,
    namaz_break_to_dict,
    overtime_from_dict,
    overtime_to_dict,
    task_from_dict,
    task_to_dict,
)

_COLUMNS = """
    record_id, employee_id, employee_name, employee_email, employee_mobile,
    work_date, shift_id, shift_name, scheduled_start, scheduled_end,
    check_ins, check_outs, breaks, namaz_breaks, tasks,
    status, total_working_hours, late_minutes, early_departure_minutes, overtime,
    version, created_at, updated_at
"""


def _row_to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_id=str(r["employee_id"]),
        employee_name=r.get("employee_name") or "",
        employee_email=r.get("employee_email") or "",
        employee_mobile=r.get("employee_mobile") or "",
        work_date=r["work_date"],
        shift_id=r["shift_id"],
        shift_name=r.get("shift_name") or "",
        scheduled_start=r["scheduled_start"],
        scheduled_end=r["scheduled_end"],
        check_ins=[check_in_from_dict(e) for e in load_json(r.get("check_ins"), [])],
        check_outs=[check_out_from_dict(e) for e in load_json(r.get("check_outs"), [])],
        breaks=AttendanceRecord.breaks_of([break_from_dict(b) for b in load_json(r.get("breaks"), [])]),
        namaz_breaks=AttendanceRecord.namaz_breaks_of(
            [namaz_break_from_dict(b) for b in load_json(r.get("namaz_breaks"), [])]
        ),
        tasks=AttendanceRecord.tasks_of([task_from_dict(t) for t in load_json(r.get("tasks"), [])]),
        status=AttendanceStatus(r["status"]),
        total_working_hours=float(r.get("total_working_hours") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        early_departure_minutes=int(r.get("early_departure_minutes") or 0),
        overtime=overtime_from_dict(load_json(r.get("overtime"))),
        version=int(r.get("version") or 0),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _document_params(record: AttendanceRecord) -> tuple:
    return (
        dump_json([check_in_to_dict(e) for e in record.check_ins]),
        dump_json([check_out_to_dict(e) for e in record.check_outs]),
        dump_json([break_to_dict(b) for b in record.breaks]),
        dump_json([namaz_break_to_dict(b) for b in record.namaz_breaks]),
        dump_json([task_to_dict(t) for t in record.tasks]),
        record.status.value,
        record.total_working_hours,
        record.late_minutes,
        record.early_departure_minutes,
        dump_json(overtime_to_dict(record.overtime)),
    )


def _range_where(employee_id: str, start_date: Optional[date], end_date: Optional[date]) -> tuple[str, list[object]]:
    clauses = ["employee_id=%s"]
    params: list[object] = [employee_id]
    if start_date is not None:
        clauses.append("work_date >= %s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("work_date <= %s")
        params.append(end_date)
    return " AND ".join(clauses), params


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_one(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, employee_name, employee_email, employee_mobile,
                        work_date, shift_id, shift_name, scheduled_start, scheduled_end,
                        check_ins, check_outs, breaks, namaz_breaks, tasks,
                        status, total_working_hours, late_minutes, early_departure_minutes, overtime,
                        version, created_at, updated_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,1,%s,%s)
                    """,
                    (
                        record.employee_id,
                        record.employee_name,
                        record.employee_email,
                        record.employee_mobile,
                        record.work_date,
                        record.shift_id,
                        record.shift_name,
                        record.scheduled_start,
                        record.scheduled_end,
                        *_document_params(record),
                        record.created_at,
                        record.updated_at,
                    ),
                )
                record_id = int(cur.lastrowid)
        except mysql_errors.IntegrityError as exc:
            if exc.errno == errorcode.ER_DUP_ENTRY:
                raise ConcurrentUpdateError("Attendance record was created concurrently, please retry") from exc
            raise
        return replace(record, record_id=record_id, version=1)

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_ins=%s, check_outs=%s, breaks=%s, namaz_breaks=%s, tasks=%s,
                    status=%s, total_working_hours=%s, late_minutes=%s, early_departure_minutes=%s,
                    overtime=%s, updated_at=%s, version=version+1
                WHERE record_id=%s AND version=%s
                """,
                (*_document_params(record), record.updated_at, record.record_id, record.version),
            )
            if cur.rowcount == 0:
                raise ConcurrentUpdateError("Attendance record was modified concurrently, please retry")
        return replace(record, version=record.version + 1)

    def find(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        newest_first: bool = True,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = _range_where(employee_id, start_date, end_date)
        order = "DESC" if newest_first else "ASC"
        sql = f"SELECT {_COLUMNS} FROM attendance_records WHERE {where} ORDER BY work_date {order}"
        if limit is not None:
            sql += " LIMIT %s OFFSET %s"
            params += [int(limit), int(offset)]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_record(r) for r in fetchall(cur)]

    def count(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> int:
        where, params = _range_where(employee_id, start_date, end_date)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            r = fetchone(cur)
            return int(r["total"]) if r else 0
