"""Request variants for the attendance endpoints.

Each ``from_json`` validates the whole body before the service is called.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ..common.datetime_utils import parse_iso_date
from ..common.validators import (
    optional_bool,
    optional_datetime,
    optional_non_negative_number,
    optional_str,
    parse_positive_int,
    require_choice,
    require_non_empty,
)
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import BreakType, NamazType, TaskPriority
from ..core.exceptions import ValidationError
from .model import GeoLocation, TaskProgress


def _body(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValidationError("Request body must be a JSON object")
    return data


def _coordinate(value: Any, field_name: str, limit: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    if not -limit <= value <= limit:
        raise ValidationError(f"{field_name} must be between -{limit:g} and {limit:g}")
    return float(value)


def parse_location(value: Any) -> Optional[GeoLocation]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValidationError("location must be an object")
    return GeoLocation(
        latitude=_coordinate(value.get("latitude"), "location.latitude", 90),
        longitude=_coordinate(value.get("longitude"), "location.longitude", 180),
        accuracy=optional_non_negative_number(value.get("accuracy"), "location.accuracy"),
        address=optional_str(value.get("address"), "location.address"),
    )


def parse_query_date(value: Optional[str], field_name: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)") from None


@dataclass(frozen=True)
class CheckInRequest:
    timestamp: Optional[datetime]
    location: Optional[GeoLocation]
    device_info: Optional[str]
    shift_id: Optional[str]
    scheduled_start: Optional[datetime]
    scheduled_end: Optional[datetime]

    @classmethod
    def from_json(cls, data: Any) -> "CheckInRequest":
        body = _body(data)
        return cls(
            timestamp=optional_datetime(body.get("timestamp"), "timestamp"),
            location=parse_location(body.get("location")),
            device_info=optional_str(body.get("deviceInfo"), "deviceInfo", max_len=200),
            shift_id=optional_str(body.get("shiftId"), "shiftId", max_len=50),
            scheduled_start=optional_datetime(body.get("scheduledStart"), "scheduledStart"),
            scheduled_end=optional_datetime(body.get("scheduledEnd"), "scheduledEnd"),
        )


@dataclass(frozen=True)
class CheckOutRequest:
    timestamp: Optional[datetime]
    location: Optional[GeoLocation]
    tasks: tuple[TaskProgress, ...]
    device_info: Optional[str]

    @classmethod
    def from_json(cls, data: Any) -> "CheckOutRequest":
        body = _body(data)
        raw_tasks = body.get("tasks") or []
        if not isinstance(raw_tasks, list):
            raise ValidationError("tasks must be a list")

        tasks = []
        for i, item in enumerate(raw_tasks):
            if not isinstance(item, Mapping):
                raise ValidationError(f"tasks[{i}] must be an object")
            completed = optional_bool(item.get("completed"), f"tasks[{i}].completed")
            tasks.append(
                TaskProgress(
                    task_id=require_non_empty(item.get("taskId") or item.get("id"), f"tasks[{i}].taskId"),
                    completed=bool(completed),
                    time_spent=optional_non_negative_number(item.get("timeSpent"), f"tasks[{i}].timeSpent"),
                )
            )

        return cls(
            timestamp=optional_datetime(body.get("timestamp"), "timestamp"),
            location=parse_location(body.get("location")),
            tasks=tuple(tasks),
            device_info=optional_str(body.get("deviceInfo"), "deviceInfo", max_len=200),
        )


@dataclass(frozen=True)
class StartBreakRequest:
    break_type: Optional[BreakType]
    namaz_type: Optional[NamazType]
    reason: Optional[str]

    @classmethod
    def from_json(cls, data: Any) -> "StartBreakRequest":
        body = _body(data)
        raw_break, raw_namaz = body.get("breakType"), body.get("namazType")
        if raw_break is not None and raw_namaz is not None:
            raise ValidationError("Provide either breakType or namazType, not both")
        return cls(
            break_type=require_choice(raw_break, BreakType, "breakType") if raw_break is not None else None,
            namaz_type=require_choice(raw_namaz, NamazType, "namazType") if raw_namaz is not None else None,
            reason=optional_str(body.get("reason"), "reason"),
        )


@dataclass(frozen=True)
class EndBreakRequest:
    break_id: str
    end: Optional[datetime]

    @classmethod
    def from_json(cls, data: Any) -> "EndBreakRequest":
        body = _body(data)
        return cls(
            break_id=require_non_empty(body.get("breakId"), "breakId"),
            end=optional_datetime(body.get("endTime"), "endTime"),
        )


@dataclass(frozen=True)
class AddTaskRequest:
    description: str
    time_allocated: Optional[float]
    priority: TaskPriority

    @classmethod
    def from_json(cls, data: Any) -> "AddTaskRequest":
        body = _body(data)
        description = require_non_empty(body.get("description"), "description")
        if len(description) > 500:
            raise ValidationError("description must be at most 500 characters")
        raw_priority = body.get("priority")
        return cls(
            description=description,
            time_allocated=optional_non_negative_number(body.get("timeAllocated"), "timeAllocated"),
            priority=require_choice(raw_priority, TaskPriority, "priority") if raw_priority else TaskPriority.MEDIUM,
        )


@dataclass(frozen=True)
class UpdateTaskRequest:
    task_id: str
    time_spent: Optional[float]
    completed: Optional[bool]

    @classmethod
    def from_json(cls, data: Any) -> "UpdateTaskRequest":
        body = _body(data)
        request = cls(
            task_id=require_non_empty(body.get("taskId"), "taskId"),
            time_spent=optional_non_negative_number(body.get("timeSpent"), "timeSpent"),
            completed=optional_bool(body.get("completed"), "completed"),
        )
        if request.time_spent is None and request.completed is None:
            raise ValidationError("Nothing to update: provide timeSpent or completed")
        return request


@dataclass(frozen=True)
class HistoryQuery:
    page: int
    limit: int
    start_date: Optional[date]
    end_date: Optional[date]

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "HistoryQuery":
        return cls(
            page=parse_positive_int(args.get("page"), "page", default=1),
            limit=parse_positive_int(args.get("limit"), "limit", default=DEFAULT_HISTORY_LIMIT, maximum=MAX_HISTORY_LIMIT),
            start_date=parse_query_date(args.get("startDate"), "startDate"),
            end_date=parse_query_date(args.get("endDate"), "endDate"),
        )


@dataclass(frozen=True)
class MonthQuery:
    year: Optional[int]
    month: Optional[int]

    @classmethod
    def from_args(cls, args: Mapping[str, str]) -> "MonthQuery":
        year = parse_positive_int(args.get("year"), "year", default=0) or None
        month = parse_positive_int(args.get("month"), "month", default=0) or None
        if month is not None and month > 12:
            raise ValidationError("month must be between 1 and 12")
        if year is not None and not 1970 <= year <= 9999:
            raise ValidationError("year is out of range")
        return cls(year=year, month=month)
