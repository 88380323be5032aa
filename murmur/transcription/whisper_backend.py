"""Local whisper.cpp speech-to-text backend."""

import time
import logging
import threading
from pathlib import Path
from typing import Optional

import numpy as np
from pywhispercpp.model import Model
from pywhispercpp.utils import redirect_stderr

from .base import AbstractTranscriptionBackend
from ..audio.encoder import read_pcm16
from ..audio.processing import resample, to_mono
from ..errors import DecodeFailure, LoadFailure, ModelNotFound, NotLoaded
from ..models.assets import WHISPER_BASE_EN

logger = logging.getLogger(__name__)

WHISPER_MODEL_FILENAME = WHISPER_BASE_EN.filename
WHISPER_SAMPLE_RATE = 16000
GREEDY_SAMPLING = 0


class WhisperTranscriptionBackend(AbstractTranscriptionBackend):
    """Transcribes WAV recordings with a locally loaded whisper.cpp model.

    whisper.cpp writes its diagnostics straight to stderr; they are discarded
    both while the model loads and while it decodes.
    """

    def __init__(self, models_dir: str, language: str = "en", n_threads: int = 4):
        """Initialize an unloaded backend.

        Args:
            models_dir: Directory holding the ggml weights file
            language: Single spoken language passed to the recognizer
            n_threads: CPU threads used for inference
        """
        super().__init__(language)
        self.models_dir = Path(models_dir)
        self.n_threads = n_threads
        self.service_name = "whisper.cpp"

        self._model: Optional[Model] = None
        self._lock = threading.Lock()

    @property
    def model_path(self) -> Path:
        return self.models_dir / WHISPER_MODEL_FILENAME

    def is_model_downloaded(self) -> bool:
        return self.model_path.exists()

    def load(self) -> None:
        """Load the weights file, replacing any model already loaded.

        The model lock is held while loading, so a reload waits for an
        in-flight transcription to finish before swapping instances.

        Raises:
            ModelNotFound: The weights file is not on disk
            LoadFailure: whisper.cpp rejected the file
        """
        model_path = self.model_path
        if not model_path.exists():
            raise ModelNotFound(
                f"Model not found at {model_path}. Please download the model first.")

        logger.info(f"Loading Whisper model from: {model_path}")
        with self._lock:
            try:
                model = Model(
                    str(model_path.resolve()),
                    params_sampling_strategy=GREEDY_SAMPLING,
                    redirect_whispercpp_logs_to=None,
                    n_threads=self.n_threads,
                    language=self.language,
                    translate=False,
                    print_progress=False,
                    print_realtime=False,
                    print_special=False,
                    print_timestamps=False,
                )
            except Exception as e:
                logger.error(f"Failed to load Whisper model: {e}")
                raise LoadFailure(f"Failed to load Whisper model: {e}") from e

            if self._model is not None:
                logger.info("Replacing previously loaded Whisper model")
            self._model = model

        logger.info("Whisper model loaded successfully")

    def is_available(self) -> bool:
        with self._lock:
            return self._model is not None

    def transcribe(self, audio_data: bytes) -> str:
        """Transcribe a WAV byte stream.

        Raises:
            NotLoaded: load() has not succeeded yet
            FormatError: The bytes are not a 16-bit PCM WAV with 1 or 2 channels
            DecodeFailure: whisper.cpp failed during recognition
        """
        with self._lock:
            if self._model is None:
                raise NotLoaded("Whisper model not loaded")

            start_time = time.time()
            pcm, source_rate, source_channels = read_pcm16(audio_data)
            logger.debug(f"Audio input: {source_rate}Hz, {source_channels} channels")

            mono = to_mono(pcm, source_channels)
            samples = resample(mono, source_rate, WHISPER_SAMPLE_RATE)
            logger.debug(f"Resampled audio: {len(samples)} samples at {WHISPER_SAMPLE_RATE}Hz")

            if len(samples) == 0:
                logger.debug("Empty audio, nothing to transcribe")
                return ""

            try:
                with redirect_stderr(to=None):
                    segments = self._model.transcribe(np.ascontiguousarray(samples, dtype=np.float32))
            except Exception as e:
                logger.error(f"Transcription failed: {e}")
                raise DecodeFailure(f"Transcription failed: {e}") from e

            text = " ".join(segment.text for segment in segments).strip()
            logger.debug(f"Transcribed {len(segments)} segments in "
                         f"{time.time() - start_time:.3f}s: '{text[:50]}'")
            return text
