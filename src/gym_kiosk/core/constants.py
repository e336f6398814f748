"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MEMBER_ID_PREFIX = "BCF"
MEMBER_ID_SEED = 1000

DEFAULT_PLAN_MONTHS = 1
PLAN_MONTH_OPTIONS = (1, 3, 6, 12)

DEFAULT_EXPIRING_THRESHOLD_DAYS = 7
MEMBER_LIST_EXPIRING_THRESHOLD_DAYS = 3

SCAN_DEBOUNCE_MS = 500
SCAN_BUFFER_RESET_MS = 100
RESULT_DISPLAY_SECONDS = 5

TREND_MONTHS = 12
