from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator


class RecordLocks:
    """Process-local mutex per (employee_id, work_date).

    Entries are dropped once no thread holds or waits on them.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[tuple[str, date], list] = {}

    @contextmanager
    def hold(self, employee_id: str, work_date: date) -> Iterator[None]:
        key = (employee_id, work_date)
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
