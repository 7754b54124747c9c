import os

SECRET_KEY = os.getenv("SECRET_KEY", "test-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "sitepay_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

# Tests inject a container of in-memory repositories; never touch MySQL on startup.
AUTO_INIT_DB = False

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
