"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_WINDOW_MINUTES = 30
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_SESSION_CODE_LENGTH = 8
DEFAULT_SESSION_CODE_MAX_ATTEMPTS = 5
DEFAULT_TREND_DAYS = 7
DEFAULT_HISTORY_LIMIT = 10
MAX_HISTORY_LIMIT = 100
DEFAULT_SESSION_LIST_LIMIT = 100
MAX_SESSION_LIST_LIMIT = 500
MAX_NOTES_LENGTH = 500
DEFAULT_BIOMETRIC_TOKEN_MAX_AGE_SECONDS = 120
DEFAULT_BIOMETRIC_TOKEN_ALGORITHM = "HS256"

# Unique index names (database/schema.sql).
ATTENDANCE_STUDENT_SESSION_KEY = "uq_attendance_student_session"
SESSIONS_ACTIVE_CLASS_KEY = "uq_sessions_active_class"
SESSIONS_ACTIVE_CODE_KEY = "uq_sessions_active_code"
