"""Unit tests for the audio and download data models."""

import pytest
import numpy as np

from murmur.models.assets import DownloadProgress
from murmur.models.audio import AudioBuffer


@pytest.mark.unit
class TestAudioBuffer:

    def test_samples_are_read_only(self):
        audio = AudioBuffer(samples=np.zeros(4, dtype=np.float32), sample_rate=16000, channels=1)

        with pytest.raises(ValueError):
            audio.samples[0] = 1.0

    def test_caller_array_stays_writable(self):
        samples = np.zeros(4, dtype=np.float32)

        audio = AudioBuffer(samples=samples, sample_rate=16000, channels=1)
        samples[0] = 0.5

        assert samples.flags.writeable is True
        assert audio.samples[0] == 0.0

    def test_list_input_converted_to_float32(self):
        audio = AudioBuffer(samples=[0.25, -0.25], sample_rate=8000, channels=2)

        assert audio.samples.dtype == np.float32
        assert audio.frame_count == 1

    def test_duration(self):
        audio = AudioBuffer(samples=np.zeros(96000, dtype=np.float32), sample_rate=48000, channels=2)

        assert audio.duration_seconds == pytest.approx(1.0)
        assert AudioBuffer(samples=[], sample_rate=0, channels=1).duration_seconds == 0.0


@pytest.mark.unit
class TestDownloadProgress:

    def test_percentage(self):
        assert DownloadProgress.create("Whisper", 250, 1000).percentage == pytest.approx(25.0)

    def test_unknown_total(self):
        progress = DownloadProgress.create("Whisper", 250, 0)

        assert progress.total == 0
        assert progress.percentage == 0.0
