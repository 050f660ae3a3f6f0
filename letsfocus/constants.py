"""Central constants for LetsFocus (light-weight and local-use oriented).

Only put small, stable primitives here - avoid runtime/config dependent values.
"""

# Session duration bounds (minutes)
MIN_DURATION_MINUTES: int = 1
MAX_DURATION_MINUTES: int = 60
DEFAULT_DURATION_MINUTES: int = 25

# Countdown tick period (seconds)
TICK_INTERVAL_SECONDS: float = 1.0

# Background music
DEFAULT_MUSIC_VOLUME: float = 0.3
DEFAULT_TRACK_NAME_PATTERN: str = "music{index}.mp3"
DEFAULT_TRACK_PROBE_LIMIT: int = 10
DEFAULT_EXTRA_TRACK_NAMES = ("background.mp3", "ambient.mp3", "focus.mp3", "chill.mp3")

# Status labels shown by presentation shells
STATUS_LABELS = {
    "idle": "READY TO FOCUS",
    "running": "FOCUS MODE ACTIVE",
    "paused": "PAUSED",
    "completed": "FOCUS SESSION COMPLETE",
}
