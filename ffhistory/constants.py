# constants.py
# Centralized constants used by the history engine. Do not change values without bumping schema_version.

SCHEMA_VERSION = "1.0.0"

# Metric thresholds (keep values identical to the dashboard figures)
NAIL_BITER_MARGIN = 5.0  # close game: absolute margin strictly below this
EXPLOSIVE_FACTOR = 1.2  # explosive week: score above 120% of league average
CONSISTENCY_RANGE_WEIGHT = 50.0

# Season layout fallbacks
DEFAULT_TOTAL_WEEKS = 18
PLAYOFF_WEEKS = 3  # round 1 + two-week championship

# Formatting
WIN_PCT_PLACES = 2
POINTS_PLACES = 2

# Throttling / traversal defaults
DEFAULT_MIN_INTERVAL_SEC = 0.10  # ~600 rpm
DEFAULT_FETCH_TIMEOUT_SEC = 20.0
DEFAULT_MAX_CHAIN_DEPTH = 12

ALL_TIME = "all-time"
