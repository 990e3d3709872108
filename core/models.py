"""
Immutable data models for the beatmap timeline.

All models are immutable dataclasses to support:
- Easy undo/redo via command pattern
- Safe sharing between the model, the playback clock and render backends
- Copy-on-write keyframe edits (the interpolator never sees a half-edited list)
"""
import uuid
from dataclasses import dataclass, field, replace
from typing import Tuple, Optional, Dict, Any, Iterable

from core.constants import (
    BPM_MIN, BPM_MAX, BPM_DEFAULT,
    BEATS_PER_MEASURE_MIN, BEATS_PER_MEASURE_MAX, BEATS_PER_MEASURE_DEFAULT,
    OBJECT_TYPES, OBJECT_COLORS, CUT_DIRECTIONS, EFFECT_TYPES,
    format_grid_position, is_finite_number,
)
from core.errors import InputError

Vec3 = Tuple[float, float, float]

ZERO_VEC3: Vec3 = (0.0, 0.0, 0.0)
UNIT_VEC3: Vec3 = (1.0, 1.0, 1.0)


def as_vec3(value: Iterable[float], name: str = "vector") -> Vec3:
    """
    Coerce a 3-component sequence into a tuple of floats.

    Args:
        value: Sequence of three numbers (tuple, list, ndarray row)
        name: Field name used in the error message

    Returns:
        Tuple of three floats

    Raises:
        InputError: If value does not have exactly three finite components
    """
    try:
        components = tuple(value)
    except TypeError:
        raise InputError(f"{name} must be a sequence of 3 numbers, got {value!r}") from None

    if len(components) != 3:
        raise InputError(f"{name} must have 3 components, got {len(components)}")

    result = []
    for component in components:
        # numpy scalars are not int/float subclasses (except float64)
        if hasattr(component, "item"):
            component = component.item()
        if not is_finite_number(component):
            raise InputError(f"{name} components must be finite numbers, got {value!r}")
        result.append(float(component))
    return (result[0], result[1], result[2])


def validate_bpm(bpm: float) -> float:
    """
    Validate a tempo before it is used by grid math.

    Args:
        bpm: Tempo in beats per minute

    Returns:
        BPM as float

    Raises:
        InputError: If bpm is not a finite number in [BPM_MIN, BPM_MAX]
    """
    if not is_finite_number(bpm):
        raise InputError(f"BPM must be a finite number, got {bpm!r}")
    if not BPM_MIN <= bpm <= BPM_MAX:
        raise InputError(f"BPM must be {BPM_MIN}-{BPM_MAX}, got {bpm}")
    return float(bpm)


def validate_beats_per_measure(beats_per_measure: int) -> int:
    """
    Validate a time signature numerator.

    Raises:
        InputError: If not an integer in [BEATS_PER_MEASURE_MIN, BEATS_PER_MEASURE_MAX]
    """
    if isinstance(beats_per_measure, bool) or not isinstance(beats_per_measure, int):
        raise InputError(f"Beats per measure must be an integer, got {beats_per_measure!r}")
    if not BEATS_PER_MEASURE_MIN <= beats_per_measure <= BEATS_PER_MEASURE_MAX:
        raise InputError(
            f"Beats per measure must be {BEATS_PER_MEASURE_MIN}-{BEATS_PER_MEASURE_MAX}, "
            f"got {beats_per_measure}"
        )
    return beats_per_measure


def new_object_id() -> str:
    """Generate a short unique object id."""
    return str(uuid.uuid4())[:8]


@dataclass(frozen=True)
class Keyframe:
    """
    Timestamped transform anchoring an object's motion at one instant.

    Attributes:
        time: Time in seconds (>= 0)
        position: (x, y, z) position
        rotation: (x, y, z) Euler rotation in radians
        scale: Optional (x, y, z) scale; None means unit scale
    """
    time: float
    position: Vec3 = ZERO_VEC3
    rotation: Vec3 = ZERO_VEC3
    scale: Optional[Vec3] = None

    def __post_init__(self):
        """Validate keyframe values."""
        if not is_finite_number(self.time):
            raise InputError(f"Keyframe time must be a finite number, got {self.time!r}")
        if self.time < 0:
            raise InputError(f"Keyframe time must be non-negative, got {self.time}")

        # Use object.__setattr__ to normalize fields of a frozen dataclass
        object.__setattr__(self, "time", float(self.time))
        object.__setattr__(self, "position", as_vec3(self.position, "position"))
        object.__setattr__(self, "rotation", as_vec3(self.rotation, "rotation"))
        if self.scale is not None:
            object.__setattr__(self, "scale", as_vec3(self.scale, "scale"))

    @property
    def effective_scale(self) -> Vec3:
        """Scale with the unit default applied."""
        return self.scale if self.scale is not None else UNIT_VEC3

    def at_time(self, time: float) -> "Keyframe":
        """Copy of this keyframe moved to another time."""
        return replace(self, time=time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "time": self.time,
            "position": list(self.position),
            "rotation": list(self.rotation),
        }
        if self.scale is not None:
            result["scale"] = list(self.scale)
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Keyframe":
        """Create Keyframe from dictionary."""
        return cls(
            time=data["time"],
            position=tuple(data.get("position", ZERO_VEC3)),
            rotation=tuple(data.get("rotation", ZERO_VEC3)),
            scale=tuple(data["scale"]) if data.get("scale") is not None else None,
        )


@dataclass(frozen=True)
class Transform:
    """
    Continuous object transform sampled at one time.

    Attributes:
        position: (x, y, z) position
        rotation: (x, y, z) Euler rotation in radians
        scale: (x, y, z) scale
    """
    position: Vec3 = ZERO_VEC3
    rotation: Vec3 = ZERO_VEC3
    scale: Vec3 = UNIT_VEC3

    @classmethod
    def from_keyframe(cls, keyframe: Keyframe) -> "Transform":
        return cls(keyframe.position, keyframe.rotation, keyframe.effective_scale)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": list(self.position),
            "rotation": list(self.rotation),
            "scale": list(self.scale),
        }


IDENTITY_TRANSFORM = Transform()


@dataclass(frozen=True)
class EditorObject:
    """
    Placeable beatmap object with its keyframed motion.

    Attributes:
        id: Unique object id
        type: Object type (block, bomb, obstacle, saber, effect)
        color: Object color name
        keyframes: Keyframes sorted by time, unique times
        cut_direction: Block cut direction (blocks only)
        effect_type: Effect style (effects only)
    """
    id: str = field(default_factory=new_object_id)
    type: str = "block"
    color: str = "red"
    keyframes: Tuple[Keyframe, ...] = field(default_factory=tuple)
    cut_direction: Optional[str] = None
    effect_type: Optional[str] = None

    def __post_init__(self):
        """Validate object and normalize keyframe order."""
        if not isinstance(self.id, str) or not self.id:
            raise InputError(f"Object id must be a non-empty string, got {self.id!r}")
        if self.type not in OBJECT_TYPES:
            raise InputError(f"Invalid object type: {self.type}. Expected one of {OBJECT_TYPES}")
        if self.color not in OBJECT_COLORS:
            raise InputError(f"Invalid color: {self.color}. Expected one of {OBJECT_COLORS}")
        if self.cut_direction is not None and self.cut_direction not in CUT_DIRECTIONS:
            raise InputError(f"Invalid cut direction: {self.cut_direction}")
        if self.effect_type is not None and self.effect_type not in EFFECT_TYPES:
            raise InputError(f"Invalid effect type: {self.effect_type}")

        keyframes = tuple(self.keyframes)
        for keyframe in keyframes:
            if not isinstance(keyframe, Keyframe):
                raise InputError(f"Expected Keyframe, got {type(keyframe).__name__}")

        # Keep keyframes time-sorted regardless of insertion order
        keyframes = tuple(sorted(keyframes, key=lambda kf: kf.time))
        for i in range(len(keyframes) - 1):
            if keyframes[i].time == keyframes[i + 1].time:
                raise InputError(
                    f"Object {self.id} has two keyframes at {keyframes[i].time}s; "
                    "keyframe times must be unique"
                )
        object.__setattr__(self, "keyframes", keyframes)

    @property
    def keyframe_times(self) -> Tuple[float, ...]:
        return tuple(kf.time for kf in self.keyframes)

    def with_keyframes(self, keyframes: Iterable[Keyframe]) -> "EditorObject":
        """Copy of this object with a new keyframe collection."""
        return replace(self, keyframes=tuple(keyframes))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "id": self.id,
            "type": self.type,
            "color": self.color,
            "keyframes": [kf.to_dict() for kf in self.keyframes],
        }
        if self.cut_direction is not None:
            result["cut_direction"] = self.cut_direction
        if self.effect_type is not None:
            result["effect_type"] = self.effect_type
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorObject":
        """Create EditorObject from dictionary."""
        keyframes = tuple(Keyframe.from_dict(kf) for kf in data.get("keyframes", []))
        return cls(
            id=data.get("id") or new_object_id(),
            type=data.get("type", "block"),
            color=data.get("color", "red"),
            keyframes=keyframes,
            cut_direction=data.get("cut_direction"),
            effect_type=data.get("effect_type"),
        )


@dataclass(frozen=True)
class BeatGridConfig:
    """
    Tempo and meter used for grid math.

    Attributes:
        bpm: Tempo in beats per minute (validated to BPM_MIN-BPM_MAX)
        beats_per_measure: Beats per measure (time signature numerator)
    """
    bpm: float = float(BPM_DEFAULT)
    beats_per_measure: int = BEATS_PER_MEASURE_DEFAULT

    def __post_init__(self):
        object.__setattr__(self, "bpm", validate_bpm(self.bpm))
        validate_beats_per_measure(self.beats_per_measure)

    def to_dict(self) -> Dict[str, Any]:
        return {"bpm": self.bpm, "beats_per_measure": self.beats_per_measure}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BeatGridConfig":
        return cls(
            bpm=data.get("bpm", float(BPM_DEFAULT)),
            beats_per_measure=data.get("beats_per_measure", BEATS_PER_MEASURE_DEFAULT),
        )


@dataclass(frozen=True)
class GridPosition:
    """
    Musical position of a time on the grid (all zero-based).

    Attributes:
        measure: Measure index
        beat_in_measure: Beat index within the measure
        subdivision: 1/16-measure slot within the measure
        total_beats: Fractional beat count from the start
    """
    measure: int
    beat_in_measure: int
    subdivision: int
    total_beats: float

    def display(self) -> str:
        """One-based "M1:1:1" readout."""
        return format_grid_position(self.measure, self.beat_in_measure, self.subdivision)


@dataclass(frozen=True)
class TimelineViewport:
    """
    Visible pixel window into the (possibly wider) timeline content.

    Derived from duration and container size; never persisted.

    Attributes:
        scroll_offset: Horizontal scroll in pixels (>= 0)
        pixels_per_second: Horizontal scale (> 0)
        content_width: Total content width in pixels
        viewport_width: Visible content width in pixels
    """
    scroll_offset: float
    pixels_per_second: float
    content_width: float
    viewport_width: float

    def __post_init__(self):
        if not self.pixels_per_second > 0:
            raise InputError(f"pixels_per_second must be positive, got {self.pixels_per_second}")
        if self.scroll_offset < 0:
            raise InputError(f"scroll_offset must be non-negative, got {self.scroll_offset}")

    @property
    def max_scroll_offset(self) -> float:
        return max(0.0, self.content_width - self.viewport_width)
