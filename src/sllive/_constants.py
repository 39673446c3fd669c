"""Internal constants shared across the library."""

API_URL = "https://metro.etfnordic.workers.dev"
USER_AGENT = "sllive/0 (+aiohttp)"

#: GTFS extended route type used by the trip table for buses.
BUS_VEHICLE_TYPE = 700

# ------------------------------------------------------------------
# Persisted selection tokens
# ------------------------------------------------------------------

SELECTION_STORAGE_KEY = "sl_live.selectedLines.v5"
NONE_TOKEN = "__NONE__"
BUS_TOKEN = "__BUS__"
BUS_SEARCH_WORDS: frozenset[str] = frozenset({"bus", "buss"})

# ------------------------------------------------------------------
# Poll + animation tuning (seconds)
# ------------------------------------------------------------------

POLL_INTERVAL = 3.0
ANIMATION_MIN_DURATION = 0.35
ANIMATION_MAX_CEILING = 2.5
ANIMATION_MAX_POLL_FRACTION = 0.85
ANIMATION_SECONDS_PER_PIXEL = 0.007
FRAME_INTERVAL = 1 / 60

#: Displacement (degrees, per axis) above which a vehicle counts as moving.
MOVEMENT_EPSILON = 2e-5
#: Displacement (degrees, per axis) below which a move is applied without animation.
SNAP_EPSILON = 1e-8

# ------------------------------------------------------------------
# Render stacking
# ------------------------------------------------------------------

VEHICLE_Z_INDEX = 500
HOVER_LABEL_Z_INDEX = 2000
PINNED_LABEL_Z_INDEX = 2500
