import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "fichalia"),
}

# Display timezone: session dates and CSV times are shown in it.
TIMEZONE = os.getenv("TIMEZONE", "Europe/Madrid")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_DIR = os.getenv("LOG_DIR") or None

# If enabled, the app applies database/schema.sql on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@fichalia.local")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
