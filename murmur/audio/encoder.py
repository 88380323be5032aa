"""WAV encoding of finished recordings and decoding for the recognizer."""

import io
import logging
import wave
from typing import Tuple

import numpy as np

from ..errors import FormatError
from ..models.audio import AudioBuffer

logger = logging.getLogger(__name__)

INT16_MAX = 32767
INT16_MIN = -32768
INT16_SCALE = 32768.0


def encode_wav(samples, sample_rate: int, channels: int) -> bytes:
    """Encode float samples in [-1, 1] as a 16-bit PCM WAV byte stream.

    Each sample is multiplied by 32767 and truncated toward zero. Samples
    outside [-1, 1] saturate at the 16-bit limits; NaN is written as 0.

    Args:
        samples: Interleaved float samples
        sample_rate: Sample rate written to the header
        channels: Channel count written to the header

    Returns:
        Complete WAV file contents
    """
    scaled = np.trunc(np.asarray(samples, dtype=np.float32) * np.float32(INT16_MAX))
    scaled = np.clip(np.nan_to_num(scaled, nan=0.0), INT16_MIN, INT16_MAX)
    pcm = scaled.astype(np.int16)

    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(pcm.astype('<i2').tobytes())

    data = buffer.getvalue()
    logger.debug(f"Encoded {len(pcm)} samples ({sample_rate}Hz, {channels}ch) into {len(data)} bytes")
    return data


def encode_buffer(audio: AudioBuffer) -> bytes:
    return encode_wav(audio.samples, audio.sample_rate, audio.channels)


def read_pcm16(data: bytes) -> Tuple[np.ndarray, int, int]:
    """Parse a 16-bit PCM WAV container.

    Returns:
        Tuple of (interleaved int16 samples, sample_rate, channels)

    Raises:
        FormatError: The bytes are not a readable 16-bit PCM WAV file
    """
    try:
        with wave.open(io.BytesIO(data), 'rb') as wf:
            channels = wf.getnchannels()
            sample_width = wf.getsampwidth()
            sample_rate = wf.getframerate()
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError) as e:
        raise FormatError(f"Failed to read WAV data: {e}") from e

    if sample_width != 2:
        raise FormatError(f"Unsupported WAV sample width: {sample_width * 8} bits (expected 16)")

    pcm = np.frombuffer(frames[:len(frames) - len(frames) % 2], dtype='<i2').astype(np.int16)
    return pcm, sample_rate, channels


def decode_wav(data: bytes) -> AudioBuffer:
    """Decode a 16-bit PCM WAV into float samples scaled by 1/32768."""
    pcm, sample_rate, channels = read_pcm16(data)
    samples = pcm.astype(np.float32) / np.float32(INT16_SCALE)
    return AudioBuffer(samples=samples, sample_rate=sample_rate, channels=channels)
