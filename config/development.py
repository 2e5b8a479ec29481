import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

MAX_OPERATIONS = int(os.getenv("MAX_OPERATIONS", "200"))
MAX_WORKERS = int(os.getenv("MAX_WORKERS", "10"))

# Used when a request carries no (or a malformed) lunch start.
DEFAULT_LUNCH_START = os.getenv("DEFAULT_LUNCH_START", "12:00")
DEFAULT_LUNCH_DURATION = int(os.getenv("DEFAULT_LUNCH_DURATION", "60"))

EXPORT_SHEET_TITLE = os.getenv("EXPORT_SHEET_TITLE", "Timeline")
