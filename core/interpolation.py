"""
Keyframe interpolation.

Turns an object's discrete keyframes into a continuous transform at any time.
Every render backend samples through here so motion math exists in one place.

Rotation is lerped component-wise in Euler radians with no shortest-path
correction: going from 350 degrees to 10 degrees sweeps back through 180.
"""
from typing import Dict, Iterable, Sequence

from core.models import (
    EditorObject, Keyframe, Transform, Vec3, IDENTITY_TRANSFORM,
)


def lerp(a: float, b: float, f: float) -> float:
    """Linear interpolation between a and b."""
    return a + (b - a) * f


def lerp_vec3(a: Vec3, b: Vec3, f: float) -> Vec3:
    """Component-wise linear interpolation of two vectors."""
    return (lerp(a[0], b[0], f), lerp(a[1], b[1], f), lerp(a[2], b[2], f))


def interpolate(keyframes: Iterable[Keyframe], t: float) -> Transform:
    """
    Sample the transform described by keyframes at time t.

    Keyframes need not be sorted. Before the first keyframe the first one
    holds; after the last keyframe the last one holds.

    Args:
        keyframes: Keyframes in any order
        t: Sample time in seconds (any real)

    Returns:
        Interpolated transform (identity when there are no keyframes)

    Example:
        >>> kfs = [Keyframe(0.0, (0, 0, 0)), Keyframe(2.0, (2, 4, 6))]
        >>> interpolate(kfs, 1.0).position
        (1.0, 2.0, 3.0)
    """
    ordered = sorted(keyframes, key=lambda kf: kf.time)
    return _interpolate_sorted(ordered, t)


def _interpolate_sorted(ordered: Sequence[Keyframe], t: float) -> Transform:
    if not ordered:
        return IDENTITY_TRANSFORM
    if len(ordered) == 1:
        return Transform.from_keyframe(ordered[0])

    first, last = ordered[0], ordered[-1]
    if t <= first.time:
        return Transform.from_keyframe(first)
    if t >= last.time:
        return Transform.from_keyframe(last)

    # Find bracketing pair a.time <= t <= b.time
    a, b = first, last
    for i in range(len(ordered) - 1):
        if ordered[i].time <= t <= ordered[i + 1].time:
            a, b = ordered[i], ordered[i + 1]
            break

    span = b.time - a.time
    f = (t - a.time) / span if span > 0 else 0.0
    f = min(1.0, max(0.0, f))

    return Transform(
        position=lerp_vec3(a.position, b.position, f),
        rotation=lerp_vec3(a.rotation, b.rotation, f),
        scale=lerp_vec3(a.effective_scale, b.effective_scale, f),
    )


def interpolate_object(obj: EditorObject, t: float) -> Transform:
    """Sample one object's transform (its keyframes are already sorted)."""
    return _interpolate_sorted(obj.keyframes, t)


def sample_transforms(objects: Iterable[EditorObject], t: float) -> Dict[str, Transform]:
    """
    Sample every object at time t.

    Args:
        objects: Objects to sample
        t: Sample time in seconds

    Returns:
        Mapping of object id to transform
    """
    return {obj.id: interpolate_object(obj, t) for obj in objects}


class KeyframeInterpolator:
    """Stateless facade over the interpolation functions for backends that want an object."""

    def interpolate(self, keyframes: Iterable[Keyframe], t: float) -> Transform:
        return interpolate(keyframes, t)

    def interpolate_object(self, obj: EditorObject, t: float) -> Transform:
        return interpolate_object(obj, t)

    def sample(self, objects: Iterable[EditorObject], t: float) -> Dict[str, Transform]:
        return sample_transforms(objects, t)
