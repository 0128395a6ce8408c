"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

APP_NAME = "Trường THPT Nguyễn Trãi"

SESSION_KEY = "eduleave_session"
DEFAULT_SESSION_HOURS = 4
DEFAULT_PAGE_SIZE = 10
DEFAULT_CURRENT_WEEK = 1

TEMP_ID_PREFIX = "TEMP-"
UNKNOWN_STUDENT_NAME = "Chưa rõ"

UPLOAD_ALLOWED_TYPES = ("image/jpeg", "image/png")
UPLOAD_MAX_BYTES = 4 * 1024 * 1024
