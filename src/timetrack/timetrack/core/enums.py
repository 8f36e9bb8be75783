from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Stored status of a daily attendance record."""

    PRESENT = "present"
    LATE = "late"
    EARLY_DEPARTURE = "early-departure"
    ABSENT = "absent"


class BreakType(str, Enum):
    GENERAL = "general"
    LUNCH = "lunch"
    TEA = "tea"
    MEETING = "meeting"
    PERSONAL = "personal"
    EMERGENCY = "emergency"
    OTHER = "other"


class NamazType(str, Enum):
    """Prayer breaks are tracked in their own bucket."""

    FAJR = "fajr"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class OvertimeStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


PRESENT_STATUSES = frozenset({AttendanceStatus.PRESENT, AttendanceStatus.LATE})
