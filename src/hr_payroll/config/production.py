import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "payroll_db"),
}

DEBUG = False

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "logs/payroll.log")

GRACE_MINUTES = int(os.getenv("GRACE_MINUTES", "5"))
MINIMUM_WAGE = os.getenv("MINIMUM_WAGE", "16000.00")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Loads the global statutory tables from seed.sql (INSERT IGNORE, safe to repeat)
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
