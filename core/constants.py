"""
Timeline and grid constants.

Grid resolution, tempo bounds, audio ceilings, timeline geometry and the
formatting helpers used by the time/position readouts.
"""
import math

# Grid resolution: finest snapping unit is 1/16 of a measure
SUBDIVISIONS_PER_MEASURE = 16

# Standard BPM ranges
BPM_MIN = 20
BPM_MAX = 400
BPM_DEFAULT = 120

# Beats per measure (time signature numerator)
BEATS_PER_MEASURE_MIN = 1
BEATS_PER_MEASURE_MAX = 16
BEATS_PER_MEASURE_DEFAULT = 4

# Audio ceilings
MAX_DURATION_SECONDS = 600.0       # 10 minutes
MAX_FILE_BYTES = 30 * 1024 * 1024  # raw file size
MAX_DECODED_BYTES = 50 * 1024 * 1024

# Accepted audio MIME types
SUPPORTED_AUDIO_TYPES = (
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/ogg",
    "audio/flac",
    "audio/x-flac",
)

# Timeline geometry (pixels)
DEFAULT_PIXELS_PER_SECOND = 100.0  # used when no audio is loaded
MIN_PIXELS_PER_SECOND = 50.0       # legibility floor, content scrolls below it
HEADER_WIDTH = 120.0               # track header gutter left of the content
WHEEL_SCROLL_STEP = 50.0
KEY_SCROLL_STEP = 100.0
AUTO_SCROLL_MARGIN = 50.0
PLAYHEAD_HIT_TOLERANCE = 10.0

# Object types and their property vocabularies
OBJECT_TYPES = ("block", "bomb", "obstacle", "saber", "effect")
OBJECT_COLORS = ("red", "blue", "white", "black", "purple", "green", "yellow")
CUT_DIRECTIONS = (
    "up", "down", "left", "right",
    "upLeft", "upRight", "downLeft", "downRight",
    "any",
)
EFFECT_TYPES = ("sparkle", "ring", "burst", "laser")


def format_time(seconds: float, precision: int = 3) -> str:
    """
    Format a time in seconds for the playhead readout.

    Args:
        seconds: Time in seconds
        precision: Number of decimals

    Returns:
        Formatted string

    Example:
        >>> format_time(2.5)
        '2.500s'
    """
    return f"{seconds:.{precision}f}s"


def format_clock(seconds: float) -> str:
    """
    Format a time in seconds as minutes and seconds.

    Example:
        >>> format_clock(75.25)
        '01:15.25'
    """
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = seconds - minutes * 60
    return f"{minutes:02d}:{secs:05.2f}"


def format_grid_position(measure: int, beat_in_measure: int, subdivision: int) -> str:
    """
    Format a zero-based grid position for display (one-based).

    Args:
        measure: Measure index (0-based)
        beat_in_measure: Beat index within the measure (0-based)
        subdivision: Subdivision index (0-based)

    Returns:
        Display string "M<measure>:<beat>:<subdivision>"

    Example:
        >>> format_grid_position(0, 0, 0)
        'M1:1:1'
    """
    return f"M{measure + 1}:{beat_in_measure + 1}:{subdivision + 1}"


def is_finite_number(value) -> bool:
    """Check that value is a real, finite number (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
