"""
Playback clock.

Audio-anchored transport for the editor. While playing, the current time is
the offset the source was started at plus the wall-clock time elapsed since
the start; the clock runs no timers of its own and is pulled once per frame
through get_current_time() or tick().

States: STOPPED (initial) -> PLAYING -> PAUSED -> PLAYING -> STOPPED.
With no audio loaded every transport call is a no-op.
"""
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from audio.decoder import AudioDecoder, DecodedAudio
from audio.device import AudioOutputDevice, AudioSourceHandle, STATE_SUSPENDED
from core.errors import AudioDeviceError

logger = logging.getLogger(__name__)


class PlaybackMode(Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass(frozen=True)
class PlaybackState:
    """
    Snapshot of the transport.

    Attributes:
        mode: Transport mode
        paused_offset_seconds: Resume offset when paused/stopped; start offset while playing
        anchor_wall_clock_time: now() when the current source started (None unless playing)
    """
    mode: PlaybackMode = PlaybackMode.STOPPED
    paused_offset_seconds: float = 0.0
    anchor_wall_clock_time: Optional[float] = None


class PlaybackListener:
    """Receives clock notifications. Override the callbacks you need."""

    def on_time_changed(self, seconds: float):
        pass

    def on_playback_state_changed(self, state: PlaybackState):
        pass


class PlaybackClock:
    """
    Transport state machine over an AudioOutputDevice.

    Usage:
        clock = PlaybackClock(device)
        clock.load(decoded)
        await clock.play()
        clock.tick()  # once per frame
    """

    def __init__(self, device: AudioOutputDevice,
                 now: Callable[[], float] = time.perf_counter):
        """
        Args:
            device: Audio output device
            now: Monotonic wall clock in seconds
        """
        self._device = device
        self._now = now
        self._audio: Optional[DecodedAudio] = None
        self._duration = 0.0
        self._state = PlaybackState()
        self._source: Optional[AudioSourceHandle] = None
        self._generation = 0
        self._listeners: List[PlaybackListener] = []

    # Listeners

    def add_listener(self, listener: PlaybackListener):
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: PlaybackListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit_time(self, seconds: float):
        for listener in list(self._listeners):
            listener.on_time_changed(seconds)

    def _emit_state(self):
        state = self._state
        for listener in list(self._listeners):
            listener.on_playback_state_changed(state)

    def _set_state(self, state: PlaybackState):
        previous = self._state
        self._state = state
        if state.mode != previous.mode:
            logger.info("Playback %s -> %s at %.3fs", previous.mode.value,
                        state.mode.value, state.paused_offset_seconds)
        if state != previous:
            self._emit_state()

    # Queries

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._audio is not None

    @property
    def audio(self) -> Optional[DecodedAudio]:
        return self._audio

    def get_duration(self) -> float:
        return self._duration

    def is_playing(self) -> bool:
        """Whether the transport is playing (end of track is detected here too)."""
        if self._state.mode == PlaybackMode.PLAYING:
            self.get_current_time()
        return self._state.mode == PlaybackMode.PLAYING

    def _clamp(self, seconds: float) -> float:
        return min(max(seconds, 0.0), self._duration)

    def _elapsed_offset(self) -> float:
        """Unclamped play position while PLAYING."""
        state = self._state
        return state.paused_offset_seconds + self._now() - state.anchor_wall_clock_time

    def get_current_time(self) -> float:
        """
        Current playhead time in seconds.

        Reaching the end of the track while playing stops the transport with
        the offset parked at the duration; playback does not loop.
        """
        if self._state.mode != PlaybackMode.PLAYING:
            return self._state.paused_offset_seconds

        elapsed = self._elapsed_offset()
        if elapsed >= self._duration:
            self._finish()
            return self._duration
        return max(elapsed, 0.0)

    def tick(self) -> float:
        """Per-frame pull: read the current time and notify listeners."""
        seconds = self.get_current_time()
        self._emit_time(seconds)
        return seconds

    # Loading

    def load(self, audio: DecodedAudio, duration: Optional[float] = None):
        """
        Make a decoded buffer the clock's track (stops any playback).

        Args:
            audio: Decoded buffer
            duration: Track duration override (defaults to the buffer's)
        """
        self.stop()
        self._audio = audio
        self._duration = float(audio.duration if duration is None else duration)
        self._set_state(PlaybackState())
        logger.info("Loaded audio: %.3fs", self._duration)

    def unload(self):
        """Drop the track and return to the empty state."""
        self.stop()
        self._audio = None
        self._duration = 0.0

    async def load_from_bytes(self, data: bytes, decoder: AudioDecoder,
                              file_name: Optional[str] = None) -> DecodedAudio:
        """
        Decode and load an audio file held in memory.

        The previous track is unloaded first; if decoding fails the clock
        stays empty and the ResourceError propagates.
        """
        self.unload()
        audio = await decoder.decode_async(data, file_name)
        self.load(audio)
        return audio

    # Transport

    def _release_source(self):
        source, self._source = self._source, None
        if source is not None:
            source.stop()

    def _finish(self):
        self._generation += 1
        self._set_state(PlaybackState(PlaybackMode.STOPPED, self._duration, None))
        self._release_source()

    def _abandon_playback(self, offset: float):
        """Leave the clock PAUSED at offset with no source after a device failure."""
        self._source = None
        self._set_state(PlaybackState(PlaybackMode.PAUSED, offset, None))

    async def play(self, from_seconds: Optional[float] = None):
        """
        Start or restart playback.

        Args:
            from_seconds: Start offset (None resumes from the stored offset;
                a stored offset at the end of the track restarts from 0)

        Raises:
            AudioDeviceError: The device could not resume or start the source
        """
        if self._audio is None:
            logger.debug("play() ignored: no audio loaded")
            return

        self._generation += 1
        generation = self._generation

        if self._device.state == STATE_SUSPENDED:
            await self._device.resume()
            if generation != self._generation:
                logger.debug("play() superseded while resuming the device")
                return

        was_playing = self._state.mode == PlaybackMode.PLAYING
        current = self._clamp(self._elapsed_offset()) if was_playing \
            else self._state.paused_offset_seconds

        if from_seconds is None:
            offset = self._clamp(current)
            if offset >= self._duration:
                offset = 0.0
        else:
            offset = self._clamp(from_seconds)

        try:
            self._release_source()
            source = self._device.create_source(self._audio)
            source.start(offset)
        except AudioDeviceError:
            logger.error("Could not start playback at %.3fs", offset)
            if was_playing:
                self._abandon_playback(current)
            else:
                self._source = None
            raise

        self._source = source
        self._set_state(PlaybackState(PlaybackMode.PLAYING, offset, self._now()))
        self._emit_time(offset)

    def pause(self):
        """
        Pause at the current position.

        The state change is a no-op unless playing, but a play() still
        waiting on the device (including the restart inside seek()) is
        always abandoned.
        """
        self._generation += 1
        if self._state.mode != PlaybackMode.PLAYING:
            logger.debug("pause() ignored: not playing")
            return
        offset = self._clamp(self._elapsed_offset())
        self._set_state(PlaybackState(PlaybackMode.PAUSED, offset, None))
        self._release_source()

    def stop(self):
        """Stop and rewind to 0."""
        self._generation += 1
        if self._audio is None:
            return
        self._set_state(PlaybackState(PlaybackMode.STOPPED, 0.0, None))
        self._release_source()

    async def seek(self, to_seconds: float):
        """
        Move the playhead.

        While playing, playback restarts at the new offset; otherwise only the
        stored offset changes (mode unchanged).
        """
        if self._audio is None:
            logger.debug("seek() ignored: no audio loaded")
            return
        target = self._clamp(to_seconds)
        if self._state.mode == PlaybackMode.PLAYING:
            self.pause()
            await self.play(target)
            return
        self._set_state(replace(self._state, paused_offset_seconds=target))
        self._emit_time(target)
