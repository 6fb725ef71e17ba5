"""Shared game constants.

Centralizes the thresholds used by the run pipeline so we can document
and adjust them in one place.
"""

# Mean Earth radius used by the haversine formula (meters)
EARTH_RADIUS_M = 6371000.0

# Fixes reporting more than this (m/s, ~43 km/h) are treated as noise
# or a non-running mode of transport.
MAX_RUNNING_SPEED_MPS = 12.0

# Segment length gate between accepted fixes (meters, both exclusive).
# Below the floor is GPS jitter, above the ceiling is a reacquisition jump.
MIN_SEGMENT_M = 2.0
MAX_SEGMENT_M = 200.0

# Minimum effort for a run to be recorded (both exclusive)
MIN_RUN_DISTANCE_M = 10.0
MIN_RUN_DURATION_S = 10

# Territory radius = distance / divisor, capped
TERRITORY_RADIUS_DIVISOR = 10.0
MAX_TERRITORY_RADIUS_M = 500.0

# One "territory gained" unit per this many meters run
TERRITORY_GAIN_STEP_M = 100.0

# XP: 10 per meter plus 1 per full minute
XP_PER_METER = 10
SECONDS_PER_XP = 60

# level(xp) = floor(sqrt(xp / LEVEL_XP_BASE)) + 1
LEVEL_XP_BASE = 100

# Window used by the weekly statistics
WEEK_DAYS = 7
