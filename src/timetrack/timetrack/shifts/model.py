from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


@dataclass(frozen=True)
class Shift:
    """Domain entity: a named working shift."""

    shift_id: str
    shift_name: str
    start_time: time
    end_time: time
    is_night_shift: bool = False

    def scheduled_window(self, work_date: date) -> tuple[datetime, datetime]:
        """Scheduled start/end for ``work_date``.

        An end time at or before the start time belongs to the next day
        (the evening shift ends at midnight).
        """

        start = datetime.combine(work_date, self.start_time)
        end = datetime.combine(work_date, self.end_time)
        if end <= start:
            end += timedelta(days=1)
        return start, end


@dataclass(frozen=True)
class ShiftAssignment:
    """The shift a record was created under, snapshotted onto the record."""

    shift_id: str
    shift_name: str
    scheduled_start: datetime
    scheduled_end: datetime
