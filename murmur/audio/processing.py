"""Sample conversions applied before recognition: downmix and resampling."""

import numpy as np

from ..errors import FormatError

INT16_SCALE = 32768.0


def to_mono(pcm: np.ndarray, channels: int) -> np.ndarray:
    """Convert interleaved int16 PCM to mono float32 in [-1, 1].

    Stereo frames average the two channels; a dangling final sample is
    treated as a frame whose right channel equals its left.
    """
    scaled = np.asarray(pcm, dtype=np.float32) / np.float32(INT16_SCALE)
    if channels == 1:
        return scaled
    if channels != 2:
        raise FormatError(f"Unsupported channel count: {channels} (expected 1 or 2)")

    if len(scaled) % 2:
        scaled = np.append(scaled, scaled[-1])
    frames = scaled.reshape(-1, 2)
    return ((frames[:, 0] + frames[:, 1]) / np.float32(2.0)).astype(np.float32)


def resample(samples: np.ndarray, from_rate: int, to_rate: int) -> np.ndarray:
    """Linear-interpolation resampler.

    Output length is int(len(samples) / (from_rate / to_rate)). Target index
    i reads source position i * ratio and blends the floor and ceil samples
    (ceil clamped to the last index) by the fractional part. Equal rates
    return the input unchanged.
    """
    samples = np.asarray(samples, dtype=np.float32)
    if from_rate == to_rate:
        return samples
    if from_rate <= 0 or to_rate <= 0:
        raise ValueError(f"Sample rates must be positive, got {from_rate} -> {to_rate}")

    ratio = from_rate / to_rate
    new_len = int(len(samples) / ratio)
    if new_len == 0:
        return np.zeros(0, dtype=np.float32)

    positions = np.arange(new_len, dtype=np.float64) * ratio
    floor_idx = np.floor(positions).astype(np.int64)
    ceil_idx = np.minimum(floor_idx + 1, len(samples) - 1)
    frac = positions - floor_idx

    source = samples.astype(np.float64)
    blended = source[floor_idx] * (1.0 - frac) + source[ceil_idx] * frac
    return blended.astype(np.float32)
