"""
Error taxonomy for the timeline engine.

- InputError: invalid caller-supplied values (rejected at the call boundary)
- ResourceError: audio loading and audio device failures

Playback calls made with no audio loaded are not errors; they are no-ops.
"""


class BeatforgeError(Exception):
    """Base class for all engine errors."""


class InputError(BeatforgeError, ValueError):
    """Invalid BPM, malformed keyframe, unknown object id or bad index."""


class ResourceError(BeatforgeError):
    """An external resource (audio file, output device) could not be used."""


class DecodeError(ResourceError):
    """Audio data is corrupt or in an unsupported format."""


class TooLargeError(ResourceError):
    """Audio data exceeds a byte-size ceiling."""

    def __init__(self, message: str, size: int = 0, limit: int = 0):
        super().__init__(message)
        self.size = size
        self.limit = limit


class TooLongError(ResourceError):
    """Audio duration exceeds the duration ceiling."""

    def __init__(self, message: str, duration: float = 0.0, limit: float = 0.0):
        super().__init__(message)
        self.duration = duration
        self.limit = limit


class AudioDeviceError(ResourceError):
    """The audio output device failed to resume, start or stop."""
