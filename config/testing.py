import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance_test"),
    "pool_size": 2,
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_WINDOW_MINUTES = 30
LATE_THRESHOLD_MINUTES = 15
SESSION_CODE_LENGTH = 8
SESSION_CODE_MAX_ATTEMPTS = 5
TREND_DAYS = 7

BIOMETRIC_TOKEN_MAX_AGE_SECONDS = 120
BIOMETRIC_TOKEN_ALGORITHM = "HS256"
