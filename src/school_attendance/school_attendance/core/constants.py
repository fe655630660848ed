"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DESCRIPTOR_LENGTH = 128
DEFAULT_RECOGNITION_THRESHOLD = 0.6
DEFAULT_RECENT_LIMIT = 20
MAX_RECENT_LIMIT = 500

DEFAULT_SCHOOL_NAME = "Smart Attendance System"
DEFAULT_ACADEMIC_YEAR = "2025-2026"

STUDENT_ID_PATTERN = r"^[A-Za-z0-9]{3,10}$"
ALLOWED_CLASSES = tuple(str(i) for i in range(1, 11))
MIN_NAME_LENGTH = 2

NO_SESSION_NAME = "No Active Session"
