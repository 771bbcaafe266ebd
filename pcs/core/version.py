"""PCS - version constants.

Keep this module tiny and dependency-free. It is imported by many places
(geometry, core models, importer/exporter) and must not have side effects.
"""

APP_NAME = "PolyCurveStudio"
APP_SHORT = "PCS"

# App semantic version (must match pyproject.toml).
APP_VERSION = "0.1.0"
# Schema version written next to the layer array when saving documents.
SCHEMA_VERSION = 1

# Canonical canvas frame (user units). Imports are normalized into it and
# exports declare it as width/height/viewBox.
CANVAS_W = 800.0
CANVAS_H = 600.0

# History depth (oldest snapshots are evicted past this bound).
HISTORY_LIMIT = 50

# Two keyframes closer than this (ms) occupy the same slot.
KEYFRAME_EPSILON = 1.0

# Scale factors below this magnitude are clamped before any division.
MIN_SCALE = 1e-6

# Tension range accepted by the smoothing function.
TENSION_MIN = 0.0
TENSION_MAX = 1.5
DEFAULT_TENSION = 0.5

# Editor defaults (original editor values).
DEFAULT_STROKE = "#22d3ee"
DEFAULT_FILL = "none"
DEFAULT_WIDTH = 2.0
DEFAULT_SNAP_PX = 10.0
DEFAULT_INSERT_PX = 20.0
DEFAULT_HIT_PX = 10.0
DEFAULT_TIMELINE_MS = 5000.0
