"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_DEPARTMENT_LIMIT = 100
DEFAULT_MY_LEAVES_LIMIT = 20
DEFAULT_REVIEW_LIMIT = 50
MAX_PAGE_LIMIT = 500
MIN_PASSWORD_LENGTH = 6

TEACHER_ID_PREFIX = "TCH"
TEACHER_ID_FALLBACK_DEPT = "GEN"

# Column sizes in database/schema.sql
MAX_NAME_LENGTH = 120
MAX_EMAIL_LENGTH = 190
MAX_DEPARTMENT_LENGTH = 120
MAX_ROLL_NUMBER_LENGTH = 50
MAX_IDENTIFIER_LENGTH = 50
MAX_ATTENDANCE_REMARKS_LENGTH = 500
MAX_LEAVE_REASON_LENGTH = 1000
MAX_REVIEW_REMARKS_LENGTH = 1000
