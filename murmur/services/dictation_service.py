"""Dictation service that runs record -> encode -> transcribe -> cleanup."""

import time
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..audio.capture import AudioCapture, format_from_name
from ..audio.devices import list_input_devices
from ..audio.encoder import encode_buffer
from ..audio.levels import LevelMeter
from ..audio.publisher import DOWNLOAD_PROGRESS_TOPIC, RECORDING_STATE_TOPIC, EventPublisher
from ..config import MurmurConfig
from ..errors import MurmurError, NotLoaded
from ..models.assets import DownloadProgress
from ..models.audio import AudioDevice, CaptureState
from ..models.transcription import CleanupMode, DictationResult
from ..storage.model_manager import ModelAssetManager
from ..transcription.llama_cleaning_engine import LlamaCleaningEngine
from ..transcription.whisper_backend import WhisperTranscriptionBackend

logger = logging.getLogger(__name__)


class DictationService:
    """Core service that owns the capture engine, both models and the model files."""

    def __init__(self, config: MurmurConfig):
        """Initialize dictation service.

        Args:
            config: Application configuration
        """
        self.config = config
        models_dir = config.get_models_directory()

        self.level_meter = LevelMeter(capacity=config.get('audio.level_meter_slots', 32))
        self.audio_capture = AudioCapture(
            level_meter=self.level_meter,
            format=format_from_name(config.get('audio.sample_format', 'float32')),
            frames_per_buffer=config.get('audio.frames_per_buffer', 1024),
            level_window=config.get('audio.level_window', 1024),
            poll_interval=config.get('audio.poll_interval_ms', 10) / 1000.0,
            join_timeout=config.get('audio.join_timeout_seconds', 5.0),
        )
        self.transcriber = WhisperTranscriptionBackend(
            models_dir=models_dir,
            language=config.get('whisper.language', 'en'),
            n_threads=config.get('whisper.n_threads', 4),
        )
        self.cleaner = LlamaCleaningEngine(
            models_dir=models_dir,
            n_ctx=config.get('llm.n_ctx', 2048),
            max_new_tokens=config.get('llm.max_new_tokens', 256),
        )
        self.model_manager = ModelAssetManager(
            models_dir=models_dir,
            chunk_size=config.get('download.chunk_size', 64 * 1024),
            connect_timeout=config.get('download.connect_timeout_seconds', 30),
        )

        self.progress_publisher = EventPublisher(DOWNLOAD_PROGRESS_TOPIC)
        self.state_publisher = EventPublisher(RECORDING_STATE_TOPIC)

        logger.info("DictationService ready")

    def list_devices(self) -> List[AudioDevice]:
        return list_input_devices()

    def get_audio_levels(self) -> List[float]:
        """Current level meter contents, oldest first, for waveform display."""
        return self.level_meter.snapshot()

    def is_recording(self) -> bool:
        return self.audio_capture.is_recording()

    def start_recording(self, device_name: Optional[str] = None) -> Dict[str, Any]:
        """Start recording from the configured or given device.

        Returns:
            Result dictionary with success status and details
        """
        if device_name is None:
            device_name = self.config.get('audio.device', '')

        try:
            self.audio_capture.start(device_name or None)
        except MurmurError as e:
            logger.error(f"Error starting recording: {e}")
            return {
                "success": False,
                "error": str(e),
            }

        self.state_publisher.publish(CaptureState.RUNNING)
        logger.info(f"Started recording on device: {device_name or '<default>'}")
        return {
            "success": True,
            "device": device_name or None,
            "sample_rate": self.audio_capture.sample_rate,
            "channels": self.audio_capture.channels,
        }

    def stop_recording(self) -> Dict[str, Any]:
        """Stop recording and encode the session as WAV.

        Returns:
            Result dictionary with the WAV bytes under 'audio'
        """
        try:
            audio = self.audio_capture.stop()
        except MurmurError as e:
            logger.error(f"Error stopping recording: {e}")
            return {
                "success": False,
                "error": str(e),
            }
        finally:
            self.state_publisher.publish(self.audio_capture.state)

        return {
            "success": True,
            "audio": encode_buffer(audio),
            "duration_seconds": audio.duration_seconds,
            "sample_rate": audio.sample_rate,
            "channels": audio.channels,
        }

    def transcribe_audio(self, audio_data: bytes) -> str:
        """Transcribe WAV bytes with the local recognizer."""
        if not self.transcriber.is_available():
            raise NotLoaded("Whisper model not loaded. Please download and load the model first.")
        return self.transcriber.transcribe(audio_data)

    def cleanup_text(self, text: str, mode: Optional[str] = None,
                     custom_prompt: Optional[str] = None) -> str:
        """Rewrite text with the local language model.

        Without a loaded language model the text is returned unchanged; the
        engine itself would raise NotLoaded.
        """
        if not self.cleaner.is_available():
            logger.info("LLM not loaded, returning transcript unchanged")
            return text

        mode = CleanupMode.parse(mode or self.config.get('cleanup.mode', 'basic'))
        if custom_prompt is None:
            custom_prompt = self.config.get('cleanup.custom_prompt') or None
        return self.cleaner.cleanup(text, mode.value, custom_prompt)

    def finish_dictation(self, mode: Optional[str] = None,
                         custom_prompt: Optional[str] = None) -> Dict[str, Any]:
        """Stop recording, transcribe and optionally clean up the result.

        Returns:
            Result dictionary with a DictationResult under 'result'
        """
        stopped = self.stop_recording()
        if not stopped["success"]:
            return stopped

        try:
            start_time = time.time()
            raw_text = self.transcribe_audio(stopped["audio"])
            transcription_time = time.time() - start_time

            text = raw_text
            cleaned = False
            cleanup_time = 0.0
            cleanup_enabled = self.config.get('cleanup.enabled', True)
            if cleanup_enabled and raw_text and self.cleaner.is_available():
                start_time = time.time()
                text = self.cleanup_text(raw_text, mode, custom_prompt)
                cleanup_time = time.time() - start_time
                cleaned = True
        except MurmurError as e:
            logger.error(f"Error processing recording: {e}")
            return {
                "success": False,
                "error": str(e),
            }

        result = DictationResult(
            raw_text=raw_text,
            text=text,
            cleaned=cleaned,
            audio_duration_seconds=stopped["duration_seconds"],
            transcription_time=transcription_time,
            cleanup_time=cleanup_time,
            cleanup_mode=CleanupMode.parse(mode or self.config.get('cleanup.mode')).value if cleaned else None,
        )
        logger.info(f"Dictation finished: '{result.text[:50]}'")
        return {
            "success": True,
            "result": result,
        }

    def load_models(self) -> Dict[str, Any]:
        """Load every model that is present on disk.

        Returns:
            Per-model dictionary: True when loaded, or the error text
        """
        outcome: Dict[str, Any] = {}
        for key, engine in (("whisper", self.transcriber), ("llm", self.cleaner)):
            if not self.model_manager.is_downloaded(key):
                logger.info(f"Skipping {key}: model not downloaded")
                outcome[key] = False
                continue
            try:
                engine.load()
                outcome[key] = True
            except MurmurError as e:
                logger.error(f"Failed to load {key}: {e}")
                outcome[key] = str(e)
        return outcome

    def models_status(self) -> Dict[str, bool]:
        status = self.model_manager.status()
        status["whisper_loaded"] = self.transcriber.is_available()
        status["llm_loaded"] = self.cleaner.is_available()
        return status

    async def download_model(self, key: str,
                             on_progress: Optional[Callable[[DownloadProgress], None]] = None) -> Path:
        """Download a model, publishing every progress snapshot on the pub/sub topic."""
        def report(progress: DownloadProgress) -> None:
            self.progress_publisher.publish(progress)
            if on_progress is not None:
                on_progress(progress)

        return await self.model_manager.download(key, report)

    def shutdown(self) -> None:
        """Stop any active recording."""
        if self.audio_capture.recording_thread is not None:
            result = self.stop_recording()
            if not result["success"]:
                logger.warning(f"Recording did not stop cleanly: {result['error']}")
        logger.info("DictationService shut down")
