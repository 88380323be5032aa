"""Audio-related data models."""

from dataclasses import dataclass
from enum import Enum

import numpy as np


class CaptureState(Enum):
    """Lifecycle of a capture session's stop flag."""
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass(frozen=True)
class AudioBuffer:
    """A finished recording: interleaved float32 samples plus format metadata."""
    samples: np.ndarray
    sample_rate: int
    channels: int

    def __post_init__(self):
        samples = np.array(self.samples, dtype=np.float32)
        samples.setflags(write=False)
        object.__setattr__(self, "samples", samples)

    @property
    def frame_count(self) -> int:
        return len(self.samples) // max(self.channels, 1)

    @property
    def duration_seconds(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.frame_count / self.sample_rate


@dataclass(frozen=True)
class AudioDevice:
    """An input device as reported by PortAudio."""
    index: int
    name: str
    is_default: bool
    max_input_channels: int
    default_sample_rate: int


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    channels: int
    total_callbacks: int
    total_samples: int
