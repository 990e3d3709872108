"""Tests for the editor timeline model."""
import pytest

from core.errors import InputError
from core.models import EditorObject, Keyframe
from core.timeline import EditorTimelineModel


@pytest.fixture
def model():
    return EditorTimelineModel.with_starter_objects()


def test_starter_objects(model):
    red, blue = model.objects
    assert (red.id, red.color, red.cut_direction) == ("1", "red", "up")
    assert (blue.id, blue.color, blue.cut_direction) == ("2", "blue", "down")
    assert red.keyframes[0].position == (-1.0, 1.0, 0.0)
    assert blue.keyframes[0].position == (1.0, 1.0, 0.0)


def test_get_and_find(model):
    assert model.get_object("1").color == "red"
    assert model.find_object("nope") is None
    with pytest.raises(InputError):
        model.get_object("nope")


def test_add_object_rejects_duplicate_id(model):
    model.add_object(EditorObject(id="3", type="bomb", color="black"))
    assert len(model) == 3
    with pytest.raises(InputError):
        model.add_object(EditorObject(id="3"))


def test_update_object(model):
    updated = model.update_object("1", color="green", cut_direction="left")
    assert updated.color == "green"
    assert model.get_object("1").cut_direction == "left"
    assert model.get_object("1").keyframes == updated.keyframes


def test_update_object_validates(model):
    with pytest.raises(InputError):
        model.update_object("1", color="orange")
    with pytest.raises(InputError):
        model.update_object("1", keyframes=())
    assert model.get_object("1").color == "red"


def test_delete_clears_selection(model):
    model.select("2")
    assert model.selected_object.id == "2"
    model.delete_object("2")
    assert model.selected_object_id is None
    assert "2" not in model


def test_delete_other_keeps_selection(model):
    model.select("1")
    model.delete_object("2")
    assert model.selected_object_id == "1"


def test_select_unknown_raises(model):
    with pytest.raises(InputError):
        model.select("missing")
    model.select("1")
    model.select(None)
    assert model.selected_object is None


def test_keyframes_stay_sorted(model):
    model.add_keyframe("1", Keyframe(4.0))
    model.add_keyframe("1", Keyframe(2.0))
    assert model.get_object("1").keyframe_times == (0.0, 2.0, 4.0)


def test_add_keyframe_at_existing_time_raises(model):
    with pytest.raises(InputError):
        model.add_keyframe("1", Keyframe(0.0, position=(9, 9, 9)))


def test_update_keyframe_resorts(model):
    model.add_keyframe("1", Keyframe(2.0))
    model.add_keyframe("1", Keyframe(4.0))
    model.update_keyframe("1", 0, Keyframe(5.0, position=(3, 3, 3)))

    obj = model.get_object("1")
    assert obj.keyframe_times == (2.0, 4.0, 5.0)
    assert obj.keyframes[2].position == (3.0, 3.0, 3.0)


def test_update_keyframe_onto_another_time_raises(model):
    model.add_keyframe("1", Keyframe(2.0))
    with pytest.raises(InputError):
        model.update_keyframe("1", 0, Keyframe(2.0))
    assert model.get_object("1").keyframe_times == (0.0, 2.0)


@pytest.mark.parametrize("index", [-1, 1, 5, True, "0"])
def test_bad_keyframe_index(model, index):
    with pytest.raises(InputError):
        model.delete_keyframe("1", index)


def test_delete_keyframe(model):
    model.add_keyframe("1", Keyframe(2.0))
    model.delete_keyframe("1", 0)
    assert model.get_object("1").keyframe_times == (2.0,)


def test_set_keyframe_at_upserts(model):
    model.set_keyframe_at("1", Keyframe(0.0, position=(7, 7, 7)))
    model.set_keyframe_at("1", Keyframe(1.0))
    obj = model.get_object("1")
    assert obj.keyframe_times == (0.0, 1.0)
    assert obj.keyframes[0].position == (7.0, 7.0, 7.0)


def test_keyframe_index_at(model):
    model.add_keyframe("1", Keyframe(1.5))
    assert model.keyframe_index_at("1", 1.5) == 1
    assert model.keyframe_index_at("1", 1.49, tolerance=0.05) == 1
    assert model.keyframe_index_at("1", 3.0) is None


def test_listeners_notified_on_mutation(model):
    calls = []
    model.add_listener(calls.append)
    model.add_keyframe("1", Keyframe(1.0))
    model.select("1")
    model.delete_object("2")
    assert calls == [model, model, model]

    model.remove_listener(calls.append)
    model.select(None)
    assert len(calls) == 3


def test_put_object_restores_position(model):
    removed = model.delete_object("1")
    model.put_object(removed, index=0)
    assert [o.id for o in model.objects] == ["1", "2"]


def test_dict_round_trip(model):
    model.select("2")
    model.add_keyframe("2", Keyframe(3.0, rotation=(0, 1, 0)))
    restored = EditorTimelineModel.from_dict(model.to_dict())
    assert restored.objects == model.objects
    assert restored.selected_object_id == "2"
