"""
Audio output device abstraction.

The playback clock only needs a device that can be resumed and that hands
out one-shot sources: a source is started once at an offset and stopped
once. See audio.sounddevice_output for the PortAudio backend.
"""
from abc import ABC, abstractmethod

STATE_SUSPENDED = "suspended"
STATE_RUNNING = "running"
STATE_CLOSED = "closed"


class AudioSourceHandle(ABC):
    """One playback of a buffer. Started at most once, stopped at most once."""

    @abstractmethod
    def start(self, offset_seconds: float):
        """Begin output at offset_seconds into the buffer."""
        raise NotImplementedError()

    @abstractmethod
    def stop(self):
        """Stop output. Safe to call when already stopped."""
        raise NotImplementedError()


class AudioOutputDevice(ABC):
    """Audio output context that creates sources for decoded buffers."""

    @property
    @abstractmethod
    def state(self) -> str:
        """One of "suspended", "running" or "closed"."""
        raise NotImplementedError()

    @abstractmethod
    async def resume(self):
        """Bring a suspended device to "running"."""
        raise NotImplementedError()

    @abstractmethod
    def create_source(self, audio) -> AudioSourceHandle:
        """
        Create a source for a decoded buffer.

        Args:
            audio: DecodedAudio to play
        """
        raise NotImplementedError()
