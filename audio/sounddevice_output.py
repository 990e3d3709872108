"""
sounddevice (PortAudio) output backend.

Each source opens its own OutputStream whose callback copies the decoded
buffer from a frame cursor and stops the stream at the end of the buffer.
The callback thread only reads the immutable sample array and its cursor.
"""
import logging
import threading
from typing import Optional

import sounddevice as sd

from audio.device import (
    AudioOutputDevice, AudioSourceHandle, STATE_SUSPENDED, STATE_RUNNING, STATE_CLOSED,
)
from core.errors import AudioDeviceError

logger = logging.getLogger(__name__)


class SoundDeviceSource(AudioSourceHandle):
    """Streams a DecodedAudio buffer through a sounddevice OutputStream."""

    def __init__(self, audio, device: Optional[str] = None, block_size: int = 512):
        """
        Args:
            audio: DecodedAudio to play
            device: sounddevice output device (None for default)
            block_size: Frames per callback
        """
        self.audio = audio
        self.device = device
        self.block_size = block_size
        self._stream: Optional[sd.OutputStream] = None
        self._position = 0
        self._lock = threading.Lock()
        self._started = False

    @property
    def position_seconds(self) -> float:
        """Playback position from the callback thread's frame cursor."""
        return self._position / self.audio.sample_rate

    def _callback(self, outdata, frames, time_info, status):
        """Called by sounddevice for each audio chunk."""
        if status:
            logger.debug("Output stream status: %s", status)

        samples = self.audio.samples
        start = self._position
        end = min(start + frames, len(samples))
        count = end - start

        outdata[:count] = samples[start:end]
        if count < frames:
            outdata[count:] = 0
            self._position = end
            raise sd.CallbackStop()
        self._position = end

    def start(self, offset_seconds: float):
        if self._started:
            raise AudioDeviceError("Audio source can only be started once")
        self._started = True

        total = len(self.audio.samples)
        self._position = min(max(int(round(offset_seconds * self.audio.sample_rate)), 0), total)

        try:
            self._stream = sd.OutputStream(
                samplerate=self.audio.sample_rate,
                channels=self.audio.channels,
                blocksize=self.block_size,
                dtype="float32",
                device=self.device,
                callback=self._callback,
            )
            self._stream.start()
        except sd.PortAudioError as e:
            self._stream = None
            logger.error("Failed to start output stream: %s", e)
            raise AudioDeviceError(f"Failed to start audio output: {e}") from e

    def stop(self):
        with self._lock:
            stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
            stream.close()
        except sd.PortAudioError as e:
            logger.error("Failed to stop output stream: %s", e)
            raise AudioDeviceError(f"Failed to stop audio output: {e}") from e


class SoundDeviceOutput(AudioOutputDevice):
    """
    Output device backed by sounddevice (PortAudio).

    Starts suspended; resume() checks that the configured output device
    exists before any stream is opened.
    """

    def __init__(self, device: Optional[str] = None, block_size: int = 512):
        self.device = device
        self.block_size = block_size
        self._state = STATE_SUSPENDED

    @classmethod
    def from_config(cls, config) -> "SoundDeviceOutput":
        """Build from an EngineConfig."""
        return cls(device=config.device_name, block_size=config.block_size)

    @property
    def state(self) -> str:
        return self._state

    async def resume(self):
        if self._state == STATE_CLOSED:
            raise AudioDeviceError("Audio device is closed")
        if self._state == STATE_RUNNING:
            return
        try:
            info = sd.query_devices(self.device, kind="output")
        except (sd.PortAudioError, ValueError) as e:
            logger.error("No usable audio output device: %s", e)
            raise AudioDeviceError(f"No usable audio output device: {e}") from e
        logger.info("Audio output ready: %s", info.get("name", self.device))
        self._state = STATE_RUNNING

    def create_source(self, audio) -> SoundDeviceSource:
        if self._state == STATE_CLOSED:
            raise AudioDeviceError("Audio device is closed")
        return SoundDeviceSource(audio, device=self.device, block_size=self.block_size)

    def close(self):
        self._state = STATE_CLOSED
