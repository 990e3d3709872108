"""
Audio decoding service.

Decodes an in-memory audio file into a float32 sample buffer with soundfile
and enforces the import ceilings: raw file size, payload size and track
duration.
"""
import asyncio
import functools
import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import soundfile as sf

from core.constants import (
    MAX_DURATION_SECONDS, MAX_FILE_BYTES, MAX_DECODED_BYTES, SUPPORTED_AUDIO_TYPES,
)
from core.errors import DecodeError, TooLargeError, TooLongError

logger = logging.getLogger(__name__)

# Not every platform's mime table knows these
for _mime, _ext in (("audio/mpeg", ".mp3"), ("audio/wav", ".wav"),
                    ("audio/ogg", ".ogg"), ("audio/flac", ".flac")):
    mimetypes.add_type(_mime, _ext)

_MB = 1024 * 1024


@dataclass(frozen=True)
class DecodedAudio:
    """
    Decoded PCM buffer.

    Attributes:
        samples: float32 array shaped (frames, channels)
        sample_rate: Frames per second
        duration: Length in seconds
    """
    samples: np.ndarray
    sample_rate: int
    duration: float

    @property
    def channels(self) -> int:
        return int(self.samples.shape[1])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[0])

    @classmethod
    def from_samples(cls, samples: np.ndarray, sample_rate: int) -> "DecodedAudio":
        """Wrap a sample array (1-D arrays become mono)."""
        samples = np.asarray(samples, dtype=np.float32)
        if samples.ndim == 1:
            samples = samples[:, np.newaxis]
        return cls(samples=samples, sample_rate=int(sample_rate),
                   duration=samples.shape[0] / float(sample_rate))


def is_audio_safe(duration: float, file_size: Optional[int] = None,
                  max_duration: float = MAX_DURATION_SECONDS,
                  max_bytes: int = MAX_DECODED_BYTES) -> bool:
    """
    Whether a decoded track is within the duration and payload ceilings.

    Example:
        >>> is_audio_safe(601.0)
        False
    """
    if duration > max_duration:
        return False
    if file_size and file_size > max_bytes:
        return False
    return True


def validate_audio_file(file_name: str, size: int,
                        max_bytes: int = MAX_FILE_BYTES) -> Tuple[bool, Optional[str]]:
    """
    Check size and format before reading a file.

    Args:
        file_name: File name (the extension decides the format)
        size: File size in bytes
        max_bytes: Raw file size ceiling

    Returns:
        (valid, error message or None)
    """
    if size > max_bytes:
        return False, (f"Audio file too large (max {max_bytes // _MB}MB, "
                       f"got {round(size / _MB)}MB)")

    mime_type, _ = mimetypes.guess_type(file_name)
    if mime_type not in SUPPORTED_AUDIO_TYPES:
        return False, f"Unsupported audio format: {mime_type or Path(file_name).suffix or file_name}"

    return True, None


class AudioDecoder:
    """Decodes audio bytes into DecodedAudio, enforcing the import ceilings."""

    def __init__(self, max_file_bytes: int = MAX_FILE_BYTES,
                 max_decoded_bytes: int = MAX_DECODED_BYTES,
                 max_duration: float = MAX_DURATION_SECONDS):
        self.max_file_bytes = max_file_bytes
        self.max_decoded_bytes = max_decoded_bytes
        self.max_duration = max_duration

    @classmethod
    def from_config(cls, config) -> "AudioDecoder":
        """Build from an EngineConfig."""
        return cls(
            max_file_bytes=config.max_file_bytes,
            max_decoded_bytes=config.max_decoded_bytes,
            max_duration=config.max_duration_seconds,
        )

    def decode(self, data: bytes, file_name: Optional[str] = None) -> DecodedAudio:
        """
        Decode an audio file held in memory.

        Args:
            data: Encoded file contents (wav, flac, ogg, mp3)
            file_name: Original file name, used for the format check

        Returns:
            DecodedAudio

        Raises:
            TooLargeError: data exceeds the raw or payload ceiling
            DecodeError: data is corrupt or in an unsupported format
            TooLongError: decoded duration exceeds the duration ceiling
        """
        size = len(data)
        if size > self.max_file_bytes:
            raise TooLargeError(
                f"Audio file too large (max {self.max_file_bytes // _MB}MB, got {round(size / _MB)}MB)",
                size=size, limit=self.max_file_bytes,
            )
        if size > self.max_decoded_bytes:
            raise TooLargeError("Audio data too large after decoding",
                                size=size, limit=self.max_decoded_bytes)

        if file_name is not None:
            valid, error = validate_audio_file(file_name, size, self.max_file_bytes)
            if not valid:
                raise DecodeError(error)

        try:
            samples, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
        except (sf.SoundFileError, RuntimeError, TypeError) as e:
            logger.warning("Failed to decode %s: %s", file_name or "audio data", e)
            raise DecodeError(f"Could not decode audio: {e}") from e

        if samples.shape[0] == 0:
            raise DecodeError("Audio file contains no samples")

        audio = DecodedAudio.from_samples(samples, sample_rate)
        if not is_audio_safe(audio.duration, max_duration=self.max_duration):
            raise TooLongError(
                f"Audio file too long (max {self.max_duration / 60:g} minutes, "
                f"got {round(audio.duration / 60)} minutes)",
                duration=audio.duration, limit=self.max_duration,
            )

        logger.info("Decoded %s: %.2fs, %d Hz, %d channel(s)",
                    file_name or "audio data", audio.duration, audio.sample_rate, audio.channels)
        return audio

    def decode_file(self, path) -> DecodedAudio:
        """Read and decode a file from disk."""
        path = Path(path)
        size = path.stat().st_size
        if size > self.max_file_bytes:
            raise TooLargeError(
                f"Audio file too large (max {self.max_file_bytes // _MB}MB, got {round(size / _MB)}MB)",
                size=size, limit=self.max_file_bytes,
            )
        return self.decode(path.read_bytes(), file_name=path.name)

    async def decode_async(self, data: bytes, file_name: Optional[str] = None) -> DecodedAudio:
        """Decode in the default executor so the event loop keeps running."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.decode, data, file_name))
