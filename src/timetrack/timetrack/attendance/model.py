from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Callable, Generic, Iterator, Optional, TypeVar

from ..common.datetime_utils import minutes_between
from ..core.enums import AttendanceStatus, BreakType, NamazType, OvertimeStatus, TaskPriority

T = TypeVar("T")


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class CheckInEvent:
    timestamp: datetime
    is_late: bool
    late_minutes: int
    device_info: str
    location: Optional[GeoLocation] = None


@dataclass(frozen=True)
class CheckOutEvent:
    timestamp: datetime
    is_early: bool
    early_minutes: int
    tasks_completed: bool
    device_info: str
    location: Optional[GeoLocation] = None


@dataclass(frozen=True)
class Break:
    break_id: str
    break_type: BreakType
    start: datetime
    end: Optional[datetime] = None
    reason: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.end is None

    @property
    def duration_minutes(self) -> int:
        if self.end is None:
            return 0
        return max(0, minutes_between(self.start, self.end))

    def ended(self, at: datetime) -> "Break":
        return replace(self, end=at)


@dataclass(frozen=True)
class NamazBreak:
    break_id: str
    namaz_type: NamazType
    start: datetime
    end: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.end is None

    @property
    def duration_minutes(self) -> int:
        if self.end is None:
            return 0
        return max(0, minutes_between(self.start, self.end))

    def ended(self, at: datetime) -> "NamazBreak":
        return replace(self, end=at)


@dataclass(frozen=True)
class Task:
    task_id: str
    description: str
    priority: TaskPriority = TaskPriority.MEDIUM
    time_allocated: Optional[float] = None
    time_spent: float = 0
    completed: bool = False
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Overtime:
    overtime_hours: float
    reason: str
    status: OvertimeStatus = OvertimeStatus.PENDING
    created_at: Optional[datetime] = None


class EmbeddedCollection(Generic[T]):
    """Ordered sub-document list addressed by id.

    Items are immutable; updates replace the element at its index.
    """

    def __init__(self, items: Optional[list[T]] = None, *, key: Callable[[T], str]):
        self._key = key
        self._items: list[T] = []
        self._index: dict[str, int] = {}
        for item in items or []:
            self.append(item)

    def append(self, item: T) -> T:
        item_id = self._key(item)
        if item_id in self._index:
            raise ValueError(f"duplicate id {item_id!r}")
        self._index[item_id] = len(self._items)
        self._items.append(item)
        return item

    def get(self, item_id: str) -> Optional[T]:
        idx = self._index.get(item_id)
        return None if idx is None else self._items[idx]

    def replace(self, item: T) -> T:
        idx = self._index[self._key(item)]
        self._items[idx] = item
        return item

    def remove(self, item_id: str) -> Optional[T]:
        idx = self._index.pop(item_id, None)
        if idx is None:
            return None
        removed = self._items.pop(idx)
        self._index = {self._key(it): i for i, it in enumerate(self._items)}
        return removed

    def copy(self) -> "EmbeddedCollection[T]":
        return EmbeddedCollection(list(self._items), key=self._key)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._index

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EmbeddedCollection):
            return self._items == other._items
        if isinstance(other, list):
            return self._items == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"EmbeddedCollection({self._items!r})"


def _breaks(items: Optional[list[Break]] = None) -> EmbeddedCollection[Break]:
    return EmbeddedCollection(items, key=lambda b: b.break_id)


def _namaz_breaks(items: Optional[list[NamazBreak]] = None) -> EmbeddedCollection[NamazBreak]:
    return EmbeddedCollection(items, key=lambda b: b.break_id)


def _tasks(items: Optional[list[Task]] = None) -> EmbeddedCollection[Task]:
    return EmbeddedCollection(items, key=lambda t: t.task_id)


@dataclass
class AttendanceRecord:
    """Domain entity: one employee's attendance for one calendar day."""

    employee_id: str
    employee_name: str
    employee_email: str
    employee_mobile: str
    work_date: date
    shift_id: str
    shift_name: str
    scheduled_start: datetime
    scheduled_end: datetime
    status: AttendanceStatus = AttendanceStatus.ABSENT
    check_ins: list[CheckInEvent] = field(default_factory=list)
    check_outs: list[CheckOutEvent] = field(default_factory=list)
    breaks: EmbeddedCollection[Break] = field(default_factory=_breaks)
    namaz_breaks: EmbeddedCollection[NamazBreak] = field(default_factory=_namaz_breaks)
    tasks: EmbeddedCollection[Task] = field(default_factory=_tasks)
    total_working_hours: float = 0.0
    late_minutes: int = 0
    early_departure_minutes: int = 0
    overtime: Optional[Overtime] = None
    record_id: Optional[int] = None
    version: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @staticmethod
    def breaks_of(items: Optional[list[Break]] = None) -> EmbeddedCollection[Break]:
        return _breaks(items)

    @staticmethod
    def namaz_breaks_of(items: Optional[list[NamazBreak]] = None) -> EmbeddedCollection[NamazBreak]:
        return _namaz_breaks(items)

    @staticmethod
    def tasks_of(items: Optional[list[Task]] = None) -> EmbeddedCollection[Task]:
        return _tasks(items)

    @property
    def last_check_in(self) -> Optional[CheckInEvent]:
        return self.check_ins[-1] if self.check_ins else None

    @property
    def last_check_out(self) -> Optional[CheckOutEvent]:
        return self.check_outs[-1] if self.check_outs else None

    @property
    def check_in_time(self) -> Optional[datetime]:
        return self.check_ins[0].timestamp if self.check_ins else None

    @property
    def is_checked_out(self) -> bool:
        last_in, last_out = self.last_check_in, self.last_check_out
        return bool(last_in and last_out and last_out.timestamp > last_in.timestamp)

    @property
    def check_out_time(self) -> Optional[datetime]:
        return self.last_check_out.timestamp if self.is_checked_out else None

    @property
    def has_open_session(self) -> bool:
        return self.last_check_in is not None and not self.is_checked_out

    def active_breaks(self) -> list[Break]:
        return [b for b in self.breaks if b.is_active]

    def active_namaz_breaks(self) -> list[NamazBreak]:
        return [b for b in self.namaz_breaks if b.is_active]

    def has_active_breaks(self) -> bool:
        return bool(self.active_breaks() or self.active_namaz_breaks())

    def had_late_check_in(self) -> bool:
        return any(ci.is_late for ci in self.check_ins)

    def break_minutes(self) -> int:
        return sum(b.duration_minutes for b in self.breaks) + sum(b.duration_minutes for b in self.namaz_breaks)

    def copy(self) -> "AttendanceRecord":
        """Detached copy so a failed operation never leaves partial changes."""

        return replace(
            self,
            check_ins=list(self.check_ins),
            check_outs=list(self.check_outs),
            breaks=self.breaks.copy(),
            namaz_breaks=self.namaz_breaks.copy(),
            tasks=self.tasks.copy(),
        )


@dataclass(frozen=True)
class TaskProgress:
    """Task state reported with a check-out."""

    task_id: str
    completed: bool
    time_spent: Optional[float] = None
