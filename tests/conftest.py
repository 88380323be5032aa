"""Pytest configuration and fixtures for Murmur tests."""

import pytest
import tempfile
import logging
from pathlib import Path
from unittest.mock import Mock, patch
import numpy as np
import yaml


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


DEFAULT_DEVICE = {
    "index": 0,
    "name": "Built-in Microphone",
    "maxInputChannels": 1,
    "defaultSampleRate": 16000.0,
}

USB_DEVICE = {
    "index": 1,
    "name": "USB Audio Interface",
    "maxInputChannels": 8,
    "defaultSampleRate": 48000.0,
}

SPEAKERS = {
    "index": 2,
    "name": "Speakers",
    "maxInputChannels": 0,
    "defaultSampleRate": 48000.0,
}


def pytest_configure(config):
    for marker in ("unit", "integration", "slow", "hardware"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    devices = [DEFAULT_DEVICE, USB_DEVICE, SPEAKERS]
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.start_stream.return_value = None
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_device_count.return_value = len(devices)
        mock_pyaudio_instance.get_device_info_by_index.side_effect = lambda i: devices[i]
        mock_pyaudio_instance.get_default_input_device_info.return_value = DEFAULT_DEVICE

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def stream_callback(mock_pyaudio):
    """Return a getter for the callback AudioCapture registered with PortAudio."""
    def get_callback():
        return mock_pyaudio['instance'].open.call_args.kwargs['stream_callback']
    return get_callback


@pytest.fixture
def test_config_file(temp_data_dir):
    """Write a YAML config whose storage lives in the temp directory."""
    config = {
        "storage": {"data_directory": "data"},
        "logging": {"level": "DEBUG", "console_output": False},
        "audio": {"join_timeout_seconds": 2.0},
    }
    path = Path(temp_data_dir) / "murmur.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)
    return str(path)


@pytest.fixture
def audio_test_data():
    """Generate various float32 audio test signals."""
    def generate_audio(pattern="sine", duration_seconds=1.0, sample_rate=16000):
        """Generate audio samples for testing.

        Args:
            pattern: Type of audio pattern ('sine', 'noise', 'silence')
            duration_seconds: Duration of audio
            sample_rate: Sample rate in Hz

        Returns:
            np.ndarray: float32 samples in [-1, 1]
        """
        samples = int(duration_seconds * sample_rate)

        if pattern == "sine":
            t = np.linspace(0, duration_seconds, samples, False)
            wave_data = np.sin(2 * np.pi * 440 * t)  # 440 Hz sine wave
        elif pattern == "noise":
            wave_data = np.random.default_rng(0).uniform(-1, 1, samples)
        elif pattern == "silence":
            wave_data = np.zeros(samples)
        else:
            raise ValueError(f"Unknown pattern: {pattern}")

        return wave_data.astype(np.float32)

    return generate_audio
