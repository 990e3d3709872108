"""Shared pytest fixtures: a scriptable audio device and a hand-driven clock."""
import asyncio
import io
from typing import List, Optional

import numpy as np
import pytest
import soundfile as sf

from audio.clock import PlaybackClock, PlaybackListener
from audio.decoder import DecodedAudio
from audio.device import (
    AudioOutputDevice, AudioSourceHandle, STATE_RUNNING, STATE_SUSPENDED,
)
from core.errors import AudioDeviceError


class FakeNow:
    """Wall clock advanced by hand."""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float):
        self.value += seconds


class FakeSource(AudioSourceHandle):
    def __init__(self, device: "FakeDevice", audio):
        self.device = device
        self.audio = audio
        self.started_at: Optional[float] = None
        self.stopped = False

    def start(self, offset_seconds: float):
        if self.device.fail_start:
            raise AudioDeviceError("start failed")
        self.started_at = offset_seconds

    def stop(self):
        self.stopped = True

    @property
    def active(self) -> bool:
        return self.started_at is not None and not self.stopped


class FakeDevice(AudioOutputDevice):
    """
    In-memory device.

    resume() waits on resume_gate when one is set, so tests can interleave
    other calls while a play() is blocked on the device.
    """

    def __init__(self, state: str = STATE_RUNNING):
        self._state = state
        self.sources: List[FakeSource] = []
        self.resume_calls = 0
        self.resume_gate: Optional[asyncio.Event] = None
        self.fail_resume = False
        self.fail_start = False

    @property
    def state(self) -> str:
        return self._state

    async def resume(self):
        self.resume_calls += 1
        if self.resume_gate is not None:
            await self.resume_gate.wait()
        if self.fail_resume:
            raise AudioDeviceError("resume failed")
        self._state = STATE_RUNNING

    def suspend(self):
        self._state = STATE_SUSPENDED

    def create_source(self, audio) -> FakeSource:
        source = FakeSource(self, audio)
        self.sources.append(source)
        return source

    @property
    def active_sources(self) -> List[FakeSource]:
        return [s for s in self.sources if s.active]


class RecordingListener(PlaybackListener):
    def __init__(self):
        self.times = []
        self.states = []

    def on_time_changed(self, seconds):
        self.times.append(seconds)

    def on_playback_state_changed(self, state):
        self.states.append(state)


def make_audio(duration: float = 10.0, sample_rate: int = 8000, channels: int = 1) -> DecodedAudio:
    frames = int(duration * sample_rate)
    return DecodedAudio.from_samples(np.zeros((frames, channels), dtype=np.float32), sample_rate)


@pytest.fixture
def now() -> FakeNow:
    return FakeNow()


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def suspended_device() -> FakeDevice:
    return FakeDevice(state=STATE_SUSPENDED)


@pytest.fixture
def audio() -> DecodedAudio:
    return make_audio(10.0)


@pytest.fixture
def clock(device, now, audio) -> PlaybackClock:
    """Clock with a 10 s track loaded."""
    clock = PlaybackClock(device, now=now)
    clock.load(audio)
    return clock


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


def encode_wav(duration: float, sample_rate: int = 8000, channels: int = 2) -> bytes:
    """A 440 Hz tone encoded as 16-bit WAV."""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    tone = (0.5 * np.sin(2 * np.pi * 440.0 * t)).astype(np.float32)
    data = np.repeat(tone[:, np.newaxis], channels, axis=1)
    buf = io.BytesIO()
    sf.write(buf, data, sample_rate, format="WAV", subtype="PCM_16")
    return buf.getvalue()


@pytest.fixture
def wav_bytes():
    return encode_wav
