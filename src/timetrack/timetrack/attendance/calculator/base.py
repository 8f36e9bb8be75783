from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..model import AttendanceRecord


class WorkingTimeCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def worked_minutes(self, record: AttendanceRecord, *, now: Optional[datetime] = None) -> int:
        raise NotImplementedError

    @abstractmethod
    def overtime_minutes(self, worked_minutes: int) -> int:
        raise NotImplementedError
