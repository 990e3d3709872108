"""
Editor timeline model.

Owns the placed objects, their keyframes and the current selection. Every
mutation replaces the affected EditorObject with a new frozen copy, so the
sorted/unique keyframe invariant is re-checked on each edit and readers
(interpolator, playback, render backends) only ever see consistent objects.
"""
import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Tuple, Any

from core.errors import InputError
from core.models import EditorObject, Keyframe

logger = logging.getLogger(__name__)

ModelListener = Callable[["EditorTimelineModel"], None]

# Fields update_object() may change; keyframes go through the keyframe methods
_UPDATABLE_FIELDS = ("type", "color", "cut_direction", "effect_type")


class EditorTimelineModel:
    """Object and keyframe store for one beatmap."""

    def __init__(self, objects: Optional[List[EditorObject]] = None):
        self._objects: Dict[str, EditorObject] = {}
        self._selected_id: Optional[str] = None
        self._listeners: List[ModelListener] = []
        for obj in objects or []:
            if obj.id in self._objects:
                raise InputError(f"Duplicate object id: {obj.id}")
            self._objects[obj.id] = obj

    @classmethod
    def with_starter_objects(cls) -> "EditorTimelineModel":
        """Model seeded with a red and a blue block, as a new project starts."""
        return cls([
            EditorObject(
                id="1", type="block", color="red", cut_direction="up",
                keyframes=(Keyframe(0.0, position=(-1.0, 1.0, 0.0)),),
            ),
            EditorObject(
                id="2", type="block", color="blue", cut_direction="down",
                keyframes=(Keyframe(0.0, position=(1.0, 1.0, 0.0)),),
            ),
        ])

    # Listeners

    def add_listener(self, callback: ModelListener):
        """Register a callback invoked with the model after every mutation."""
        self._listeners.append(callback)

    def remove_listener(self, callback: ModelListener):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self):
        for callback in list(self._listeners):
            callback(self)

    # Reads

    @property
    def objects(self) -> Tuple[EditorObject, ...]:
        """All objects in insertion order."""
        return tuple(self._objects.values())

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, object_id: str) -> bool:
        return object_id in self._objects

    def find_object(self, object_id: str) -> Optional[EditorObject]:
        """Object by id, or None."""
        return self._objects.get(object_id)

    def get_object(self, object_id: str) -> EditorObject:
        """
        Object by id.

        Raises:
            InputError: If no object has that id
        """
        obj = self._objects.get(object_id)
        if obj is None:
            raise InputError(f"Unknown object id: {object_id}")
        return obj

    @property
    def selected_object_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_object(self) -> Optional[EditorObject]:
        if self._selected_id is None:
            return None
        return self._objects.get(self._selected_id)

    def keyframe_index_at(self, object_id: str, time: float,
                          tolerance: float = 1e-6) -> Optional[int]:
        """Index of the keyframe within tolerance of time, or None."""
        obj = self.get_object(object_id)
        for index, keyframe in enumerate(obj.keyframes):
            if abs(keyframe.time - time) <= tolerance:
                return index
        return None

    # Object mutations

    def add_object(self, obj: EditorObject) -> EditorObject:
        """
        Add a new object.

        Raises:
            InputError: If an object with the same id exists
        """
        if obj.id in self._objects:
            raise InputError(f"Object id already exists: {obj.id}")
        self._objects[obj.id] = obj
        logger.debug("Added %s %s", obj.type, obj.id)
        self._notify()
        return obj

    def put_object(self, obj: EditorObject, index: Optional[int] = None) -> EditorObject:
        """
        Insert or replace an object.

        Args:
            obj: Object to store
            index: Position to re-insert a missing object at (restores order on undo)
        """
        if obj.id in self._objects or index is None:
            self._objects[obj.id] = obj
        else:
            items = list(self._objects.items())
            index = max(0, min(index, len(items)))
            items.insert(index, (obj.id, obj))
            self._objects = dict(items)
        self._notify()
        return obj

    def update_object(self, object_id: str, **changes: Any) -> EditorObject:
        """
        Replace some fields of an object.

        Args:
            object_id: Object to update
            **changes: type, color, cut_direction and/or effect_type

        Returns:
            The updated object

        Raises:
            InputError: Unknown id, unknown field or invalid value
        """
        obj = self.get_object(object_id)
        unknown = set(changes) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise InputError(f"Cannot update fields: {sorted(unknown)}")
        updated = replace(obj, **changes)
        self._objects[object_id] = updated
        self._notify()
        return updated

    def delete_object(self, object_id: str) -> EditorObject:
        """Remove an object, clearing the selection if it pointed at it."""
        obj = self.get_object(object_id)
        del self._objects[object_id]
        if self._selected_id == object_id:
            self._selected_id = None
        logger.debug("Deleted object %s", object_id)
        self._notify()
        return obj

    def index_of(self, object_id: str) -> int:
        """Insertion-order position of an object."""
        self.get_object(object_id)
        return list(self._objects).index(object_id)

    def select(self, object_id: Optional[str]):
        """Select an object (None clears the selection)."""
        if object_id is not None:
            self.get_object(object_id)
        if object_id != self._selected_id:
            self._selected_id = object_id
            self._notify()

    # Keyframe mutations

    def _check_index(self, obj: EditorObject, index: int):
        if isinstance(index, bool) or not isinstance(index, int):
            raise InputError(f"Keyframe index must be an integer, got {index!r}")
        if not 0 <= index < len(obj.keyframes):
            raise InputError(
                f"Keyframe index {index} out of range for object {obj.id} "
                f"({len(obj.keyframes)} keyframes)"
            )

    def _store(self, obj: EditorObject) -> EditorObject:
        self._objects[obj.id] = obj
        self._notify()
        return obj

    def add_keyframe(self, object_id: str, keyframe: Keyframe) -> EditorObject:
        """
        Add a keyframe to an object.

        Raises:
            InputError: If the object already has a keyframe at that time
        """
        obj = self.get_object(object_id)
        if keyframe.time in obj.keyframe_times:
            raise InputError(f"Object {object_id} already has a keyframe at {keyframe.time}s")
        return self._store(obj.with_keyframes(obj.keyframes + (keyframe,)))

    def update_keyframe(self, object_id: str, index: int, keyframe: Keyframe) -> EditorObject:
        """
        Replace the keyframe at index (time-sorted order).

        The collection is re-sorted afterwards, so a time change may move
        the keyframe to another index.
        """
        obj = self.get_object(object_id)
        self._check_index(obj, index)
        keyframes = list(obj.keyframes)
        keyframes[index] = keyframe
        return self._store(obj.with_keyframes(keyframes))

    def delete_keyframe(self, object_id: str, index: int) -> EditorObject:
        """Remove the keyframe at index (time-sorted order)."""
        obj = self.get_object(object_id)
        self._check_index(obj, index)
        keyframes = list(obj.keyframes)
        keyframes.pop(index)
        return self._store(obj.with_keyframes(keyframes))

    def set_keyframe_at(self, object_id: str, keyframe: Keyframe) -> EditorObject:
        """Replace the keyframe at keyframe.time, or add it if none exists."""
        obj = self.get_object(object_id)
        keyframes = [kf for kf in obj.keyframes if kf.time != keyframe.time]
        keyframes.append(keyframe)
        return self._store(obj.with_keyframes(keyframes))

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objects": [obj.to_dict() for obj in self._objects.values()],
            "selected_object_id": self._selected_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EditorTimelineModel":
        model = cls([EditorObject.from_dict(o) for o in data.get("objects", [])])
        selected = data.get("selected_object_id")
        if selected is not None and selected in model:
            model._selected_id = selected
        return model
