SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

MAX_OPERATIONS = 200
MAX_WORKERS = 10

DEFAULT_LUNCH_START = "12:00"
DEFAULT_LUNCH_DURATION = 60

EXPORT_SHEET_TITLE = "Timeline"
