"""Audio capture module: one background worker per recording session."""

import logging
import threading
import time
from threading import Thread, Event
from typing import Any, List, Optional

import numpy as np
import pyaudio

from .devices import resolve_input_device
from .levels import LevelMeter, compute_rms
from ..errors import (
    AlreadyRecording,
    JoinFailure,
    NotRecording,
    StreamFailure,
    UnsupportedFormat,
)
from ..models.audio import AudioBuffer, AudioStats, CaptureState

logger = logging.getLogger(__name__)

# Formats the callback knows how to normalise, with their numpy dtype and full scale.
SUPPORTED_FORMATS = {
    pyaudio.paFloat32: (np.float32, 1.0),
    pyaudio.paInt16: (np.int16, 32767.0),
}

FORMAT_NAMES = {
    "float32": pyaudio.paFloat32,
    "int16": pyaudio.paInt16,
    "int24": pyaudio.paInt24,
    "int32": pyaudio.paInt32,
    "int8": pyaudio.paInt8,
    "uint8": pyaudio.paUInt8,
}


def format_from_name(name: str) -> int:
    """Translate a config string such as 'float32' into a PortAudio format constant."""
    try:
        return FORMAT_NAMES[name.lower()]
    except KeyError:
        raise UnsupportedFormat(f"Unknown sample format: {name}") from None


class AudioCapture:
    """Records from an input device on a background thread and feeds a LevelMeter."""

    def __init__(
        self,
        level_meter: LevelMeter,
        format: int = pyaudio.paFloat32,
        frames_per_buffer: int = 1024,
        level_window: int = 1024,
        poll_interval: float = 0.01,
        join_timeout: float = 5.0,
    ):
        """Initialize audio capture.

        Args:
            level_meter: Shared loudness buffer written while recording
            format: PortAudio sample format requested from the device
            frames_per_buffer: Frames delivered per PortAudio callback
            level_window: Samples per RMS level measurement
            poll_interval: Seconds between stop-flag checks in the worker
            join_timeout: Seconds stop() waits for the worker to exit
        """
        self.level_meter = level_meter
        self.format = format
        self.frames_per_buffer = frames_per_buffer
        self.level_window = level_window
        self.poll_interval = poll_interval
        self.join_timeout = join_timeout

        # Session state
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.streaming_event = Event()
        self.state = CaptureState.STOPPED
        self.worker_error: Optional[BaseException] = None

        # Sample buffer, guarded by samples_lock
        self.samples_lock = threading.Lock()
        self.sample_chunks: List[np.ndarray] = []
        self.total_samples = 0

        # Only touched by the callback thread
        self._level_pending = np.zeros(0, dtype=np.float32)

        self.sample_rate = 0
        self.channels = 0
        self.total_callbacks = 0
        self.start_time: Optional[float] = None

    def start(self, device_name: Optional[str] = None) -> None:
        """Start recording from the named device, or the default input.

        Raises:
            AlreadyRecording: A session is already active
            DeviceNotFound: The named device does not exist
            NoDefaultDevice: No name given and the host has no default input
            UnsupportedFormat: The configured sample format cannot be captured
        """
        if self.recording_thread is not None:
            raise AlreadyRecording("Already recording")

        if self.format not in SUPPORTED_FORMATS:
            raise UnsupportedFormat(f"Unsupported sample format: {self.format}")

        pa = pyaudio.PyAudio()
        try:
            device = resolve_input_device(pa, device_name or None)
        except Exception:
            pa.terminate()
            raise

        with self.samples_lock:
            self.sample_chunks = []
            self.total_samples = 0
        self._level_pending = np.zeros(0, dtype=np.float32)

        self.sample_rate = device.default_sample_rate
        self.channels = min(device.max_input_channels, 2)
        self.total_callbacks = 0
        self.worker_error = None
        self.stop_event.clear()
        self.streaming_event.clear()
        self.start_time = time.time()

        logger.info(f"Starting audio recording on '{device.name}': "
                    f"{self.sample_rate}Hz, {self.channels} channels")

        self.recording_thread = Thread(
            target=self._record_continuously,
            args=(pa, device.index),
            daemon=True,
        )
        self.recording_thread.name = "AudioCaptureThread"
        self.state = CaptureState.RUNNING
        self.recording_thread.start()

    def stop(self) -> AudioBuffer:
        """Stop the worker, wait for it to exit and return the recording.

        Raises:
            NotRecording: No session has been started
            JoinFailure: The worker did not exit within the join timeout
            StreamFailure: The worker could not run the hardware stream
        """
        if self.recording_thread is None:
            raise NotRecording("No recording in progress")

        logger.info("Stopping audio recording")
        self.state = CaptureState.STOPPING
        self.stop_event.set()

        self.recording_thread.join(timeout=self.join_timeout)
        if self.recording_thread.is_alive():
            logger.error("Recording thread did not stop cleanly")
            raise JoinFailure("Failed to join recording thread")

        self.recording_thread = None
        self.state = CaptureState.STOPPED

        if self.worker_error is not None:
            error, self.worker_error = self.worker_error, None
            raise StreamFailure(f"Recording failed: {error}") from error

        with self.samples_lock:
            if self.sample_chunks:
                samples = np.concatenate(self.sample_chunks)
            else:
                samples = np.zeros(0, dtype=np.float32)

        logger.info(f"Recording stopped. {len(samples)} samples "
                    f"in {self.total_callbacks} callbacks")
        return AudioBuffer(samples=samples, sample_rate=self.sample_rate, channels=self.channels)

    def is_recording(self) -> bool:
        """True while a live worker exists and stop has not been requested.

        A worker whose stream failed has already exited, so this turns False
        before stop() is called to collect the StreamFailure.
        """
        return (self.recording_thread is not None
                and self.recording_thread.is_alive()
                and not self.stop_event.is_set())

    def wait_until_streaming(self, timeout: Optional[float] = None) -> bool:
        """Block until the worker's hardware stream is running."""
        return self.streaming_event.wait(timeout)

    def _open_audio_stream(self, pa: pyaudio.PyAudio, device_index: int) -> pyaudio.Stream:
        stream = pa.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            input_device_index=device_index,
            frames_per_buffer=self.frames_per_buffer,
            stream_callback=self._on_audio,
            start=False,
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.frames_per_buffer} frames/buffer")
        return stream

    def _record_continuously(self, pa: pyaudio.PyAudio, device_index: int) -> None:
        """Internal method: owns the hardware stream for the session's lifetime."""
        stream = None
        try:
            stream = self._open_audio_stream(pa, device_index)
            stream.start_stream()
            self.streaming_event.set()
            while not self.stop_event.wait(self.poll_interval):
                pass
        except Exception as e:
            logger.error(f"Recording error: {e}")
            self.worker_error = e
        finally:
            self.streaming_event.clear()
            if stream is not None:
                stream.stop_stream()
                stream.close()
            pa.terminate()

    def _on_audio(self, in_data: bytes, frame_count: int, time_info: Any, status: int):
        """PortAudio callback: store samples and update loudness levels."""
        if status:
            logger.debug(f"Audio callback status flags: {status}")
        self.ingest(in_data)
        return (None, pyaudio.paContinue)

    def ingest(self, raw: bytes) -> None:
        """Normalise one buffer of raw device data and append it to the session."""
        dtype, full_scale = SUPPORTED_FORMATS[self.format]
        samples = np.frombuffer(raw, dtype=dtype).astype(np.float32)
        if full_scale != 1.0:
            samples /= np.float32(full_scale)
        np.clip(samples, -1.0, 1.0, out=samples)

        with self.samples_lock:
            self.sample_chunks.append(samples)
            self.total_samples += len(samples)
            self.total_callbacks += 1

        self._update_levels(np.abs(samples))

    def _update_levels(self, magnitudes: np.ndarray) -> None:
        pending = np.concatenate((self._level_pending, magnitudes))
        offset = 0
        while len(pending) - offset >= self.level_window:
            window = pending[offset:offset + self.level_window]
            self.level_meter.push(compute_rms(window))
            offset += self.level_window
        self._level_pending = pending[offset:]

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time and self.is_recording():
            duration = time.time() - self.start_time
        elif self.sample_rate and self.channels:
            duration = self.total_samples / (self.sample_rate * self.channels)

        return AudioStats(
            is_recording=self.is_recording(),
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            channels=self.channels,
            total_callbacks=self.total_callbacks,
            total_samples=self.total_samples,
        )

    def __del__(self):
        """Ensure the worker is signalled on deletion."""
        if self.recording_thread is not None:
            self.stop_event.set()
