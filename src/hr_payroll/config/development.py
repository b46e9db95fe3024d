import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "payroll_db"),
}

DEBUG = True

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FILE = os.getenv("LOG_FILE") or None

GRACE_MINUTES = int(os.getenv("GRACE_MINUTES", "5"))
MINIMUM_WAGE = os.getenv("MINIMUM_WAGE", "16000.00")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Loads the global statutory tables from seed.sql (INSERT IGNORE, safe to repeat)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
