import os

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True

STORAGE_BACKEND = "json"
# Tests pass a tmp_path-based DB_PATH through create_app overrides
DB_PATH = os.getenv("DB_PATH", os.path.join("data", "test-database.json"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

LOG_LEVEL = "WARNING"
# No log files during tests
LOG_DIR = None

AUTO_INIT_DB = False

ENABLE_FACE_EXTRACTION = False
