"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

API_BASE_PATH = "/api/time-tracking"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

MAX_NOTES_LENGTH = 2000
MAX_SOURCE_LENGTH = 100

DEFAULT_TIMEZONE = "UTC"
DEFAULT_MAX_REPORT_DAYS = 93
MAX_REPORT_DAYS_LIMIT = 366
MAX_ROUNDING_MINUTES = 60

GLOBAL_SETTINGS_SCOPE = "*"
