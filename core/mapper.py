"""
Timeline coordinate mapping.

Maps between seconds, content pixels (left edge of the content area is 0)
and screen x (content pixels plus the fixed track header gutter), and keeps
the horizontal scroll offset inside the content bounds.
"""
import logging
from typing import Optional, Tuple

from core.beat_grid import BeatGrid
from core.constants import (
    DEFAULT_PIXELS_PER_SECOND, MIN_PIXELS_PER_SECOND, MAX_DURATION_SECONDS,
    HEADER_WIDTH, WHEEL_SCROLL_STEP, KEY_SCROLL_STEP, AUTO_SCROLL_MARGIN,
    PLAYHEAD_HIT_TOLERANCE,
)
from core.errors import InputError
from core.models import TimelineViewport

logger = logging.getLogger(__name__)


def compute_scale(duration: float, container_width: float,
                  max_duration: float = MAX_DURATION_SECONDS,
                  min_pixels_per_second: float = MIN_PIXELS_PER_SECOND,
                  default_pixels_per_second: float = DEFAULT_PIXELS_PER_SECOND) -> float:
    """
    Horizontal scale that fits the track into the content area.

    Tracks too long to stay legible are clamped to the minimum scale and
    the content scrolls instead. Time past max_duration is not representable.

    Args:
        duration: Track duration in seconds
        container_width: Content area width in pixels (header excluded)

    Returns:
        Pixels per second

    Example:
        >>> compute_scale(10.0, 800.0)
        80.0
    """
    if duration <= 0:
        return default_pixels_per_second
    fitted = container_width / min(duration, max_duration)
    return max(fitted, min_pixels_per_second)


class TimelineCoordinateMapper:
    """
    Converts between time, pixels and screen positions for one timeline.

    Holds the track duration and the viewport (scale and scroll). Call
    resize() whenever the duration or the container width changes.
    """

    def __init__(self, duration: float = 0.0, container_width: float = 800.0,
                 header_width: float = HEADER_WIDTH,
                 max_duration: float = MAX_DURATION_SECONDS,
                 min_pixels_per_second: float = MIN_PIXELS_PER_SECOND,
                 default_pixels_per_second: float = DEFAULT_PIXELS_PER_SECOND):
        """
        Args:
            duration: Track duration in seconds (0 when nothing is loaded)
            container_width: Content area width in pixels (header excluded)
            header_width: Track header gutter width in pixels
            max_duration: Longest representable time in seconds
            min_pixels_per_second: Legibility floor for the scale
            default_pixels_per_second: Scale used with no audio loaded
        """
        self.header_width = header_width
        self.max_duration = max_duration
        self.min_pixels_per_second = min_pixels_per_second
        self.default_pixels_per_second = default_pixels_per_second
        self.duration = 0.0
        self._viewport = TimelineViewport(0.0, default_pixels_per_second, 0.0, container_width)
        self.resize(duration, container_width)

    @classmethod
    def from_config(cls, config, duration: float = 0.0,
                    container_width: float = 800.0) -> "TimelineCoordinateMapper":
        """Build a mapper from an EngineConfig."""
        return cls(
            duration=duration,
            container_width=container_width,
            header_width=config.header_width,
            max_duration=config.max_duration_seconds,
            min_pixels_per_second=config.min_pixels_per_second,
            default_pixels_per_second=config.default_pixels_per_second,
        )

    # Viewport

    @property
    def viewport(self) -> TimelineViewport:
        return self._viewport

    @property
    def pixels_per_second(self) -> float:
        return self._viewport.pixels_per_second

    @property
    def scroll_offset(self) -> float:
        return self._viewport.scroll_offset

    @property
    def content_width(self) -> float:
        return self._viewport.content_width

    @property
    def viewport_width(self) -> float:
        return self._viewport.viewport_width

    @property
    def max_scroll_offset(self) -> float:
        return self._viewport.max_scroll_offset

    def resize(self, duration: float, container_width: float):
        """
        Recompute scale and content width for a new duration or container size.

        The scroll offset is kept where possible and re-clamped.
        """
        if duration < 0:
            raise InputError(f"duration must be non-negative, got {duration}")
        if container_width < 0:
            raise InputError(f"container_width must be non-negative, got {container_width}")

        self.duration = float(duration)
        previous_scroll = self._viewport.scroll_offset
        pps = compute_scale(self.duration, container_width, self.max_duration,
                            self.min_pixels_per_second, self.default_pixels_per_second)
        content_width = min(self.duration, self.max_duration) * pps
        self._viewport = TimelineViewport(
            scroll_offset=0.0,
            pixels_per_second=pps,
            content_width=content_width,
            viewport_width=float(container_width),
        )
        self.set_scroll(previous_scroll)
        logger.debug("Timeline resized: duration=%.3fs width=%.0fpx scale=%.2fpx/s",
                     self.duration, container_width, pps)

    # Conversions

    def time_to_pixel(self, t: float) -> float:
        """Content-area x of time t, scroll applied."""
        return t * self.pixels_per_second - self.scroll_offset

    def pixel_to_time(self, px: float) -> float:
        """Time at content-area x, scroll applied."""
        return (px + self.scroll_offset) / self.pixels_per_second

    def time_to_screen_x(self, t: float) -> float:
        """Screen x of time t (header gutter included)."""
        return self.time_to_pixel(t) + self.header_width

    def screen_x_to_time(self, screen_x: float) -> float:
        """Time at screen x (header gutter included)."""
        return self.pixel_to_time(screen_x - self.header_width)

    def clamp_time(self, t: float) -> float:
        return min(max(t, 0.0), self.duration)

    # Scrolling

    def set_scroll(self, offset: float) -> float:
        """Set the scroll offset, clamped to the content bounds. Returns the applied offset."""
        clamped = min(max(offset, 0.0), self.max_scroll_offset)
        self._viewport = TimelineViewport(
            scroll_offset=clamped,
            pixels_per_second=self._viewport.pixels_per_second,
            content_width=self._viewport.content_width,
            viewport_width=self._viewport.viewport_width,
        )
        return clamped

    def scroll_by(self, delta: float) -> float:
        """Scroll by delta pixels (use WHEEL_SCROLL_STEP / KEY_SCROLL_STEP for input)."""
        return self.set_scroll(self.scroll_offset + delta)

    def scroll_wheel(self, direction: int) -> float:
        """One wheel notch; direction is +1 (right) or -1 (left)."""
        return self.scroll_by(direction * WHEEL_SCROLL_STEP)

    def scroll_key(self, direction: int) -> float:
        """One arrow-key step; direction is +1 (right) or -1 (left)."""
        return self.scroll_by(direction * KEY_SCROLL_STEP)

    def scroll_to_start(self) -> float:
        return self.set_scroll(0.0)

    def scroll_to_end(self) -> float:
        return self.set_scroll(self.max_scroll_offset)

    def follow_playhead(self, current_time: float,
                        margin: float = AUTO_SCROLL_MARGIN) -> bool:
        """
        Auto-scroll so the playhead stays in view.

        Nothing happens while the playhead is within margin pixels of the
        visible area; once it leaves, the view recentres on it.

        Args:
            current_time: Playhead time in seconds
            margin: Slack in pixels before scrolling

        Returns:
            True if the scroll offset changed
        """
        if self.duration <= 0:
            return False

        playhead_x = current_time * self.pixels_per_second
        left_edge = self.scroll_offset
        right_edge = self.scroll_offset + self.viewport_width
        if left_edge - margin <= playhead_x <= right_edge + margin:
            return False

        previous = self.scroll_offset
        self.set_scroll(playhead_x - self.viewport_width / 2)
        return self.scroll_offset != previous

    # Queries

    def visible_time_range(self) -> Tuple[float, float]:
        """(start, end) seconds of the visible content area."""
        start = self.pixel_to_time(0.0)
        end = self.pixel_to_time(self.viewport_width)
        return start, end

    def is_time_visible(self, t: float) -> bool:
        start, end = self.visible_time_range()
        return start <= t <= end

    def hit_playhead(self, screen_x: float, current_time: float,
                     tolerance: float = PLAYHEAD_HIT_TOLERANCE) -> bool:
        """Whether a pointer at screen_x grabs the playhead."""
        return abs(screen_x - self.time_to_screen_x(current_time)) <= tolerance

    def pointer_to_time(self, screen_x: float, grid: Optional[BeatGrid] = None) -> float:
        """
        Time selected by a pointer at screen_x.

        Converts, snaps to the grid (when given) and clamps to [0, duration].
        """
        t = self.screen_x_to_time(screen_x)
        if grid is not None:
            t = grid.snap(t)
        return self.clamp_time(t)
