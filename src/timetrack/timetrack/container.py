from __future__ import annotations

from dataclasses import dataclass

from .attendance.calculator.base import WorkingTimeCalculator
from .attendance.calculator.standard_calculator import StandardWorkingTimeCalculator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.locks import RecordLocks
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_SHIFT_ID
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import AttendanceStatsService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    shifts_repo: ShiftRepository

    attendance_service: AttendanceService
    stats_service: AttendanceStatsService


def build_services(
    attendance_repo: AttendanceRepository,
    shifts_repo: ShiftRepository,
    *,
    default_shift_id: str = DEFAULT_SHIFT_ID,
    calculator: WorkingTimeCalculator | None = None,
    **service_kwargs,
) -> Container:
    """Wire services over any repository pair (MySQL in the app, fakes in tests)."""

    calculator = calculator or StandardWorkingTimeCalculator()
    attendance_service = AttendanceService(
        attendance_repo,
        shifts_repo,
        strategy_factory=AttendanceStrategyFactory(),
        calculator=calculator,
        locks=RecordLocks(),
        default_shift_id=default_shift_id,
        **service_kwargs,
    )
    stats_kwargs = {"clock": service_kwargs["clock"]} if "clock" in service_kwargs else {}
    stats_service = AttendanceStatsService(attendance_repo, calculator=calculator, **stats_kwargs)

    return Container(
        attendance_repo=attendance_repo,
        shifts_repo=shifts_repo,
        attendance_service=attendance_service,
        stats_service=stats_service,
    )


def build_container(*, db_config: dict, default_shift_id: str = DEFAULT_SHIFT_ID) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        MySQLAttendanceRepository(conn),
        MySQLShiftRepository(conn),
        default_shift_id=default_shift_id,
    )
