"""Tests for the immutable data models."""
import dataclasses

import numpy as np
import pytest

from core.errors import InputError
from core.models import (
    BeatGridConfig, EditorObject, GridPosition, Keyframe, TimelineViewport, Transform,
)


def test_keyframe_normalizes_vectors():
    kf = Keyframe(1, position=[1, 2, 3], rotation=np.array([0.0, 0.5, 1.0]))
    assert kf.time == 1.0
    assert kf.position == (1.0, 2.0, 3.0)
    assert kf.rotation == (0.0, 0.5, 1.0)
    assert kf.scale is None
    assert kf.effective_scale == (1.0, 1.0, 1.0)


@pytest.mark.parametrize("time", [-0.1, float("nan"), float("inf"), None, "1"])
def test_keyframe_rejects_bad_time(time):
    with pytest.raises(InputError):
        Keyframe(time)


@pytest.mark.parametrize("position", [(1, 2), (1, 2, 3, 4), (1, float("nan"), 0), 5])
def test_keyframe_rejects_bad_vector(position):
    with pytest.raises(InputError):
        Keyframe(0.0, position=position)


def test_keyframe_is_frozen():
    kf = Keyframe(0.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        kf.time = 2.0
    assert kf.at_time(2.0).time == 2.0
    assert kf.time == 0.0


def test_object_sorts_keyframes():
    obj = EditorObject(keyframes=(Keyframe(3.0), Keyframe(1.0), Keyframe(2.0)))
    assert obj.keyframe_times == (1.0, 2.0, 3.0)
    assert len(obj.id) == 8


def test_object_rejects_duplicate_times():
    with pytest.raises(InputError):
        EditorObject(keyframes=(Keyframe(1.0), Keyframe(1.0, position=(1, 0, 0))))


@pytest.mark.parametrize("changes", [
    {"type": "note"},
    {"color": "orange"},
    {"cut_direction": "sideways"},
    {"effect_type": "smoke"},
    {"id": ""},
])
def test_object_rejects_unknown_vocabulary(changes):
    with pytest.raises(InputError):
        EditorObject(**changes)


def test_object_round_trips_through_dict():
    obj = EditorObject(
        id="abc", type="effect", color="purple", effect_type="ring",
        keyframes=(Keyframe(0.5, (1, 2, 3), (0, 1, 0), (2, 2, 2)), Keyframe(0.0)),
    )
    data = obj.to_dict()
    assert data["keyframes"][0]["time"] == 0.0
    assert "scale" not in data["keyframes"][0]
    assert "cut_direction" not in data
    assert EditorObject.from_dict(data) == obj


def test_transform_to_dict():
    assert Transform().to_dict() == {
        "position": [0.0, 0.0, 0.0], "rotation": [0.0, 0.0, 0.0], "scale": [1.0, 1.0, 1.0],
    }


def test_grid_config_dict():
    config = BeatGridConfig(bpm=90, beats_per_measure=3)
    assert config.bpm == 90.0
    assert BeatGridConfig.from_dict(config.to_dict()) == config
    assert BeatGridConfig.from_dict({}) == BeatGridConfig()


def test_grid_position_display_is_one_based():
    assert GridPosition(2, 3, 15, 11.0).display() == "M3:4:16"


def test_viewport_validation():
    viewport = TimelineViewport(0.0, 80.0, 800.0, 600.0)
    assert viewport.max_scroll_offset == 200.0
    with pytest.raises(InputError):
        TimelineViewport(0.0, 0.0, 800.0, 600.0)
    with pytest.raises(InputError):
        TimelineViewport(-1.0, 80.0, 800.0, 600.0)
