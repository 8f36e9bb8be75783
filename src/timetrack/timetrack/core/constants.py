"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

GRACE_PERIOD_MINUTES = 15
STANDARD_SHIFT_MINUTES = 8 * 60

WEEKLY_WORKING_DAYS = 5
YEARLY_WORKING_DAYS = 252
MONTHS_PER_YEAR = 12

ATTENDANCE_WEIGHT = 0.7
PUNCTUALITY_WEIGHT = 0.3

DEFAULT_HISTORY_LIMIT = 30
MAX_HISTORY_LIMIT = 100
DEFAULT_SUMMARY_DAYS = 30

DEFAULT_SHIFT_ID = "morning"
CUSTOM_SHIFT_ID = "custom"
DEFAULT_DEVICE_INFO = "Web Browser"
