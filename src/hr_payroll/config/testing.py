import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "payroll_test"),
}

DEBUG = False
TESTING = True

LOG_LEVEL = "WARNING"
LOG_FILE = None

GRACE_MINUTES = 5
MINIMUM_WAGE = "16000.00"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Loads the global statutory tables from seed.sql (INSERT IGNORE, safe to repeat)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
