"""
Waveform envelope for the timeline's audio lane.
"""
from typing import Tuple

import numpy as np

from core.errors import InputError


def to_mono(samples: np.ndarray) -> np.ndarray:
    """Average channels of a (frames, channels) array; 1-D input is returned as is."""
    samples = np.asarray(samples, dtype=np.float32)
    if samples.ndim > 1:
        return samples.mean(axis=1)
    return samples


def compute_peaks(samples: np.ndarray, bucket_count: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Per-bucket minimum and maximum of the mono mixdown.

    The track is split into bucket_count nearly equal runs of frames; the
    timeline draws one vertical line per bucket from min to max.

    Args:
        samples: Audio samples (mono or (frames, channels))
        bucket_count: Number of buckets, typically the lane width in pixels

    Returns:
        (mins, maxs) float32 arrays of length bucket_count; buckets past the
        end of a short track are 0
    """
    if bucket_count <= 0:
        raise InputError(f"bucket_count must be positive, got {bucket_count}")

    mono = to_mono(samples)
    mins = np.zeros(bucket_count, dtype=np.float32)
    maxs = np.zeros(bucket_count, dtype=np.float32)
    total = len(mono)
    if total == 0:
        return mins, maxs

    edges = np.linspace(0, total, bucket_count + 1).astype(np.int64)
    for i in range(bucket_count):
        start, end = edges[i], edges[i + 1]
        if start < end:
            chunk = mono[start:end]
            mins[i] = chunk.min()
            maxs[i] = chunk.max()
    return mins, maxs


def peak_amplitude(samples: np.ndarray) -> float:
    """Largest absolute sample value over all channels (0.0 for empty input)."""
    samples = np.asarray(samples)
    if samples.size == 0:
        return 0.0
    return float(np.max(np.abs(samples)))
