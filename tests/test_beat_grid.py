"""Tests for beat grid math."""
import pytest

from core.beat_grid import (
    BeatGrid, beat_duration, measure_duration, subdivision_duration,
    position_of, snap, validate_bpm,
)
from core.errors import InputError
from core.models import BeatGridConfig


def test_durations_at_120_bpm():
    assert beat_duration(120) == pytest.approx(0.5)
    assert measure_duration(120, 4) == pytest.approx(2.0)
    assert subdivision_duration(120, 4) == pytest.approx(0.125)


def test_subdivision_count_is_overridable():
    assert subdivision_duration(120, 4, subdivisions=8) == pytest.approx(0.25)


def test_position_of():
    pos = position_of(2.25, 120, 4)
    assert (pos.measure, pos.beat_in_measure, pos.subdivision) == (1, 0, 2)
    assert pos.total_beats == pytest.approx(4.5)
    assert pos.display() == "M2:1:3"

    start = position_of(0.0, 120, 4)
    assert start.display() == "M1:1:1"


def test_position_in_three_four():
    pos = position_of(1.0, 120, 3)
    # two beats in, measure is 1.5 s
    assert (pos.measure, pos.beat_in_measure) == (0, 2)


@pytest.mark.parametrize("t", [0.0, 0.06, 0.0625, 0.3, 1.01, 7.77, 123.456])
def test_snap_is_idempotent(t):
    once = snap(t, 120, 4)
    assert snap(once, 120, 4) == pytest.approx(once)


def test_snap_rounds_half_up():
    assert snap(0.0625, 120, 4) == pytest.approx(0.125)
    assert snap(0.06, 120, 4) == pytest.approx(0.0)
    assert snap(0.19, 120, 4) == pytest.approx(0.25)


@pytest.mark.parametrize("bpm", [0, -5, 19.9, 400.1, float("nan"), float("inf"), "120", True])
def test_validate_bpm_rejects(bpm):
    with pytest.raises(InputError):
        validate_bpm(bpm)


def test_validate_bpm_accepts_bounds():
    assert validate_bpm(20) == 20.0
    assert validate_bpm(400) == 400.0


def test_config_validates():
    with pytest.raises(InputError):
        BeatGridConfig(bpm=10)
    with pytest.raises(InputError):
        BeatGridConfig(beats_per_measure=0)


def test_grid_object_wraps_functions():
    grid = BeatGrid(BeatGridConfig(bpm=120, beats_per_measure=4))
    assert grid.beat_duration == pytest.approx(0.5)
    assert grid.measure_duration == pytest.approx(2.0)
    assert grid.subdivision_duration == pytest.approx(0.125)
    assert grid.snap(0.1) == pytest.approx(0.125)
    assert grid.position_of(2.25).display() == "M2:1:3"


def test_grid_lines_within_range():
    grid = BeatGrid(BeatGridConfig(bpm=120, beats_per_measure=4))
    assert list(grid.iter_measure_times(0.0, 6.0)) == pytest.approx([0.0, 2.0, 4.0, 6.0])
    assert list(grid.iter_beat_times(0.9, 2.0)) == pytest.approx([1.0, 1.5, 2.0])
    assert len(list(grid.iter_subdivision_times(0.0, 1.0))) == 9


def test_nudge_moves_by_subdivisions():
    grid = BeatGrid()
    assert grid.nudge(0.5, 2) == pytest.approx(0.75)
    assert grid.nudge(0.1, -1) == pytest.approx(0.0)
    assert grid.nudge(0.0, -3) == 0.0


def test_with_config_revalidates():
    grid = BeatGrid()
    faster = grid.with_config(bpm=240)
    assert faster.beat_duration == pytest.approx(0.25)
    with pytest.raises(InputError):
        grid.with_config(bpm=1000)


def test_from_engine_config():
    from core.settings import EngineConfig

    grid = BeatGrid.from_config(EngineConfig(grid=BeatGridConfig(bpm=60), subdivisions_per_measure=4))
    assert grid.subdivision_duration == pytest.approx(1.0)
