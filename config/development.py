import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "class_attendance"),
    "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo classes and rosters on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

SESSION_WINDOW_MINUTES = int(os.getenv("SESSION_WINDOW_MINUTES", "30"))
LATE_THRESHOLD_MINUTES = int(os.getenv("LATE_THRESHOLD_MINUTES", "15"))
SESSION_CODE_LENGTH = int(os.getenv("SESSION_CODE_LENGTH", "8"))
SESSION_CODE_MAX_ATTEMPTS = int(os.getenv("SESSION_CODE_MAX_ATTEMPTS", "5"))
TREND_DAYS = int(os.getenv("TREND_DAYS", "7"))

BIOMETRIC_TOKEN_MAX_AGE_SECONDS = int(os.getenv("BIOMETRIC_TOKEN_MAX_AGE_SECONDS", "120"))
BIOMETRIC_TOKEN_ALGORITHM = os.getenv("BIOMETRIC_TOKEN_ALGORITHM", "HS256")
