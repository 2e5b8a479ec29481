"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from fractions import Fraction

MAX_OPERATIONS = 200
MAX_WORKERS = 10
MAX_LUNCH_MINUTES = 480

DEFAULT_LUNCH_HOUR = 12
DEFAULT_LUNCH_MINUTE = 0
DEFAULT_LUNCH_MINUTES = 60

PDTV_WIDTH = 10
WORKER_ID_WIDTH = 8

SECONDS_PER_DAY = 86400
MINUTES_PER_DAY = 1440
HOURS_PER_DAY = 24

# Window boundary tolerance shared by the scheduler and the emitted formulas.
BOUNDARY_TOLERANCE = Fraction(1, SECONDS_PER_DAY)

NO_REMARKS = "no remarks"
NOTHING = "none"
