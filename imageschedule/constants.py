"""Timing floors, ceilings and defaults for image scheduling.

All durations are in milliseconds.
"""

# Minimum allowed visible duration for a single image
MIN_VISIBLE_FLOOR_MS = 1_000
# Default visible duration for a single image
DEFAULT_MIN_VISIBLE_MS = 3_000

# Clamp range for the hold extension granted when no next image cuts in
HOLD_MIN_MS = 0
HOLD_MAX_MS = 180_000
DEFAULT_HOLD_MS = 45_000

# Number of concurrent display slots (composition columns)
DEFAULT_MAX_SLOTS = 4
# Largest slot count the service accepts per request
MAX_SLOTS_LIMIT = 64

# Minimum dwell time between composition changes
COMPOSITION_INTERVAL_FLOOR_MS = 500
DEFAULT_COMPOSITION_INTERVAL_MS = 2_000

# Spacing used when interpolating missing capture times
TIMESTAMP_INTERVAL_MS = 1_000
