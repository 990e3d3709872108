"""Tests for undo/redo commands."""
import pytest

from core.commands import (
    AddKeyframeCommand, AddObjectCommand, CommandHistory, DeleteKeyframeCommand,
    DeleteObjectCommand, UpdateKeyframeCommand, UpdateObjectCommand,
)
from core.errors import InputError
from core.models import EditorObject, Keyframe
from core.timeline import EditorTimelineModel


@pytest.fixture
def history():
    return CommandHistory(EditorTimelineModel.with_starter_objects())


def test_add_object_undo_redo(history):
    bomb = EditorObject(id="b", type="bomb", color="black")
    history.execute(AddObjectCommand(bomb))
    assert "b" in history.model
    assert history.get_undo_description() == "Add Bomb"

    assert history.undo()
    assert "b" not in history.model
    assert history.get_redo_description() == "Add Bomb"

    assert history.redo()
    assert history.model.get_object("b") == bomb


def test_delete_object_undo_restores_order_and_selection(history):
    history.model.select("1")
    history.execute(DeleteObjectCommand("1"))
    assert history.model.selected_object_id is None

    history.undo()
    assert [o.id for o in history.model.objects] == ["1", "2"]
    assert history.model.selected_object_id == "1"


def test_update_object_undo(history):
    history.execute(UpdateObjectCommand("2", color="white"))
    assert history.model.get_object("2").color == "white"
    history.undo()
    assert history.model.get_object("2").color == "blue"


def test_keyframe_commands_undo(history):
    model = history.model
    history.execute(AddKeyframeCommand("1", Keyframe(2.0)))
    history.execute(UpdateKeyframeCommand("1", 1, Keyframe(3.0)))
    history.execute(DeleteKeyframeCommand("1", 0))
    assert model.get_object("1").keyframe_times == (3.0,)

    history.undo()
    assert model.get_object("1").keyframe_times == (0.0, 3.0)
    history.undo()
    assert model.get_object("1").keyframe_times == (0.0, 2.0)
    history.undo()
    assert model.get_object("1").keyframe_times == (0.0,)
    assert not history.can_undo()


def test_failed_command_is_not_recorded(history):
    with pytest.raises(InputError):
        history.execute(AddKeyframeCommand("1", Keyframe(0.0)))
    assert not history.can_undo()


def test_failed_command_keeps_redo(history):
    history.execute(UpdateObjectCommand("1", color="green"))
    history.undo()
    with pytest.raises(InputError):
        history.execute(AddKeyframeCommand("1", Keyframe(0.0)))
    assert history.can_redo()
    assert history.get_redo_description() is not None


def test_new_command_clears_redo(history):
    history.execute(UpdateObjectCommand("1", color="green"))
    history.undo()
    assert history.can_redo()
    history.execute(UpdateObjectCommand("1", color="yellow"))
    assert not history.can_redo()
    assert history.get_redo_description() is None


def test_history_limit(history):
    history.max_history = 3
    for t in range(1, 6):
        history.execute(AddKeyframeCommand("1", Keyframe(float(t))))
    undone = 0
    while history.undo():
        undone += 1
    assert undone == 3
    assert history.model.get_object("1").keyframe_times == (0.0, 1.0, 2.0)


def test_undo_on_empty_history(history):
    assert not history.undo()
    assert not history.redo()
    history.clear()
    assert history.get_undo_description() is None


def test_undo_before_execute_raises(history):
    with pytest.raises(ValueError):
        UpdateObjectCommand("1", color="green").undo(history.model)
