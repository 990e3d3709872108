"""
Command pattern for undo/redo support.

Editor-initiated changes to the timeline model go through commands to enable:
- Full undo/redo history
- Human-readable history entries ("Add Keyframe", "Delete Object")
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Any, Dict

from core.models import EditorObject, Keyframe
from core.timeline import EditorTimelineModel


class Command(ABC):
    """Base class for all commands."""

    @abstractmethod
    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        """
        Execute command against the model.

        Args:
            model: Timeline model to modify

        Returns:
            The same model, modified
        """
        raise NotImplementedError()

    @abstractmethod
    def undo(self, model: EditorTimelineModel) -> EditorTimelineModel:
        """
        Revert the command.

        Args:
            model: Timeline model to modify

        Returns:
            The same model, restored
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable command description for UI."""
        raise NotImplementedError()


class _ObjectSnapshotCommand(Command):
    """Stores the object before execution and restores it on undo."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        self._previous_object: Optional[EditorObject] = None

    def _remember(self, model: EditorTimelineModel):
        self._previous_object = model.get_object(self.object_id)

    def undo(self, model: EditorTimelineModel) -> EditorTimelineModel:
        if self._previous_object is None:
            raise ValueError("Command has not been executed yet")
        model.put_object(self._previous_object)
        return model


class AddObjectCommand(Command):
    """Command to place a new object."""

    def __init__(self, obj: EditorObject):
        self.obj = obj

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        model.add_object(self.obj)
        return model

    def undo(self, model: EditorTimelineModel) -> EditorTimelineModel:
        model.delete_object(self.obj.id)
        return model

    @property
    def description(self) -> str:
        return f"Add {self.obj.type.capitalize()}"


class DeleteObjectCommand(Command):
    """Command to delete an object (restores position and selection on undo)."""

    def __init__(self, object_id: str):
        self.object_id = object_id
        self._deleted: Optional[EditorObject] = None
        self._index = 0
        self._was_selected = False

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        self._index = model.index_of(self.object_id)
        self._was_selected = model.selected_object_id == self.object_id
        self._deleted = model.delete_object(self.object_id)
        return model

    def undo(self, model: EditorTimelineModel) -> EditorTimelineModel:
        if self._deleted is None:
            raise ValueError("Command has not been executed yet")
        model.put_object(self._deleted, index=self._index)
        if self._was_selected:
            model.select(self._deleted.id)
        return model

    @property
    def description(self) -> str:
        return "Delete Object"


class UpdateObjectCommand(_ObjectSnapshotCommand):
    """Command to change an object's properties (color, cut direction, ...)."""

    def __init__(self, object_id: str, **changes: Any):
        super().__init__(object_id)
        self.changes: Dict[str, Any] = changes

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        self._remember(model)
        model.update_object(self.object_id, **self.changes)
        return model

    @property
    def description(self) -> str:
        return "Update Object"


class AddKeyframeCommand(_ObjectSnapshotCommand):
    """Command to add a keyframe to an object."""

    def __init__(self, object_id: str, keyframe: Keyframe):
        super().__init__(object_id)
        self.keyframe = keyframe

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        self._remember(model)
        model.add_keyframe(self.object_id, self.keyframe)
        return model

    @property
    def description(self) -> str:
        return "Add Keyframe"


class UpdateKeyframeCommand(_ObjectSnapshotCommand):
    """Command to move or edit a keyframe."""

    def __init__(self, object_id: str, index: int, keyframe: Keyframe):
        super().__init__(object_id)
        self.index = index
        self.keyframe = keyframe

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        self._remember(model)
        model.update_keyframe(self.object_id, self.index, self.keyframe)
        return model

    @property
    def description(self) -> str:
        return "Update Keyframe"


class DeleteKeyframeCommand(_ObjectSnapshotCommand):
    """Command to delete a keyframe."""

    def __init__(self, object_id: str, index: int):
        super().__init__(object_id)
        self.index = index

    def execute(self, model: EditorTimelineModel) -> EditorTimelineModel:
        self._remember(model)
        model.delete_keyframe(self.object_id, self.index)
        return model

    @property
    def description(self) -> str:
        return "Delete Keyframe"


class CommandHistory:
    """
    Undo/redo stacks bound to one timeline model.

    Only the newest ``max_history`` commands can be undone. Trimming drops the
    oldest entries from the bottom of the undo stack; their edits stay applied
    to the model and simply become permanent. Executing a new command
    discards everything on the redo stack.

    Usage:
        history = CommandHistory(model)
        history.execute(AddKeyframeCommand("1", Keyframe(2.0)))
        history.undo()
    """

    def __init__(self, model: EditorTimelineModel, max_history: int = 100):
        self.model = model
        self.max_history = max_history
        self._undo_stack: List[Command] = []
        self._redo_stack: List[Command] = []

    def execute(self, command: Command):
        """Run a command against the model and record it.

        A command that raises is not recorded and the redo stack is kept.
        """
        command.execute(self.model)
        self._undo_stack.append(command)
        overflow = len(self._undo_stack) - self.max_history
        if overflow > 0:
            del self._undo_stack[:overflow]
        self._redo_stack.clear()

    def undo(self) -> bool:
        """Revert the newest command. Returns False when there is nothing to undo."""
        if not self._undo_stack:
            return False
        command = self._undo_stack.pop()
        command.undo(self.model)
        self._redo_stack.append(command)
        return True

    def redo(self) -> bool:
        """Re-apply the newest undone command. Returns False when there is none."""
        if not self._redo_stack:
            return False
        command = self._redo_stack.pop()
        command.execute(self.model)
        self._undo_stack.append(command)
        return True

    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def can_redo(self) -> bool:
        return bool(self._redo_stack)

    def clear(self):
        """Forget all recorded commands. The model is left as it is."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    def get_undo_description(self) -> Optional[str]:
        """Label for an "Undo ..." menu entry, or None."""
        return self._undo_stack[-1].description if self._undo_stack else None

    def get_redo_description(self) -> Optional[str]:
        """Label for a "Redo ..." menu entry, or None."""
        return self._redo_stack[-1].description if self._redo_stack else None
