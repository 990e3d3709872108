"""
Beat grid math.

Converts between seconds and musical positions (measures, beats and
1/16-measure subdivisions) and snaps times to the subdivision grid.
All functions assume a validated BPM (see validate_bpm).
"""
import math
from typing import Iterator, Optional

from core.constants import SUBDIVISIONS_PER_MEASURE
from core.errors import InputError
from core.models import (
    BeatGridConfig, GridPosition, validate_bpm, validate_beats_per_measure,
)

__all__ = [
    "BeatGrid", "beat_duration", "measure_duration", "subdivision_duration",
    "position_of", "snap", "validate_bpm", "validate_beats_per_measure",
]


def beat_duration(bpm: float) -> float:
    """
    Length of one beat in seconds.

    Example:
        >>> beat_duration(120)
        0.5
    """
    return 60.0 / bpm


def measure_duration(bpm: float, beats_per_measure: int) -> float:
    """Length of one measure in seconds."""
    return beat_duration(bpm) * beats_per_measure


def subdivision_duration(bpm: float, beats_per_measure: int,
                         subdivisions: int = SUBDIVISIONS_PER_MEASURE) -> float:
    """
    Length of one grid subdivision in seconds.

    Args:
        bpm: Tempo in beats per minute
        beats_per_measure: Beats per measure
        subdivisions: Subdivisions per measure (default 16)

    Returns:
        Subdivision length in seconds

    Example:
        >>> subdivision_duration(120, 4)
        0.125
    """
    return measure_duration(bpm, beats_per_measure) / subdivisions


def position_of(time: float, bpm: float, beats_per_measure: int,
                subdivisions: int = SUBDIVISIONS_PER_MEASURE) -> GridPosition:
    """
    Musical position of a time.

    Args:
        time: Time in seconds
        bpm: Tempo in beats per minute
        beats_per_measure: Beats per measure
        subdivisions: Subdivisions per measure

    Returns:
        Zero-based GridPosition

    Example:
        >>> position_of(2.25, 120, 4).display()
        'M2:1:3'
    """
    beats = time / beat_duration(bpm)
    sub = subdivision_duration(bpm, beats_per_measure, subdivisions)
    return GridPosition(
        measure=int(math.floor(beats / beats_per_measure)),
        beat_in_measure=int(math.floor(beats % beats_per_measure)),
        subdivision=int(math.floor((time / sub) % subdivisions)),
        total_beats=beats,
    )


def snap(time: float, bpm: float, beats_per_measure: int,
         subdivisions: int = SUBDIVISIONS_PER_MEASURE) -> float:
    """
    Snap a time to the nearest subdivision, halves rounding up.

    Example:
        >>> snap(0.07, 120, 4)
        0.125
    """
    sub = subdivision_duration(bpm, beats_per_measure, subdivisions)
    return math.floor(time / sub + 0.5) * sub


class BeatGrid:
    """
    Grid bound to one tempo and meter.

    Used by the timeline to snap pointer input and to draw grid lines
    over the visible time range.
    """

    def __init__(self, config: Optional[BeatGridConfig] = None,
                 subdivisions: int = SUBDIVISIONS_PER_MEASURE):
        """
        Args:
            config: Tempo and meter (defaults to 120 BPM, 4 beats)
            subdivisions: Subdivisions per measure
        """
        self.config = config or BeatGridConfig()
        if subdivisions < 1:
            raise InputError(f"subdivisions must be >= 1, got {subdivisions}")
        self.subdivisions = subdivisions

    @classmethod
    def from_config(cls, config) -> "BeatGrid":
        """Build from an EngineConfig."""
        return cls(config.grid, config.subdivisions_per_measure)

    @property
    def bpm(self) -> float:
        return self.config.bpm

    @property
    def beats_per_measure(self) -> int:
        return self.config.beats_per_measure

    @property
    def beat_duration(self) -> float:
        return beat_duration(self.bpm)

    @property
    def measure_duration(self) -> float:
        return measure_duration(self.bpm, self.beats_per_measure)

    @property
    def subdivision_duration(self) -> float:
        return subdivision_duration(self.bpm, self.beats_per_measure, self.subdivisions)

    def position_of(self, time: float) -> GridPosition:
        return position_of(time, self.bpm, self.beats_per_measure, self.subdivisions)

    def snap(self, time: float) -> float:
        return snap(time, self.bpm, self.beats_per_measure, self.subdivisions)

    def nudge(self, time: float, steps: int) -> float:
        """Snap time then move it by whole subdivisions (never below 0)."""
        return max(0.0, self.snap(time) + steps * self.subdivision_duration)

    def _iter_multiples(self, step: float, start: float, end: float) -> Iterator[float]:
        index = max(0, int(math.ceil(start / step - 1e-9)))
        while True:
            t = index * step
            if t > end + 1e-9:
                return
            yield t
            index += 1

    def iter_beat_times(self, start: float, end: float) -> Iterator[float]:
        """Beat line times within [start, end]."""
        return self._iter_multiples(self.beat_duration, start, end)

    def iter_measure_times(self, start: float, end: float) -> Iterator[float]:
        """Measure line times within [start, end]."""
        return self._iter_multiples(self.measure_duration, start, end)

    def iter_subdivision_times(self, start: float, end: float) -> Iterator[float]:
        """Subdivision line times within [start, end]."""
        return self._iter_multiples(self.subdivision_duration, start, end)

    def with_config(self, **changes) -> "BeatGrid":
        """New grid with bpm and/or beats_per_measure changed (validated)."""
        data = self.config.to_dict()
        data.update(changes)
        return BeatGrid(BeatGridConfig.from_dict(data), self.subdivisions)
