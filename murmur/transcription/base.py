"""Capability interfaces shared by local and remote providers."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from ..models.transcription import ModelState

logger = logging.getLogger(__name__)


class AbstractTranscriptionBackend(ABC):
    """Abstract base class for speech-to-text providers."""

    def __init__(self, language: str = "en"):
        """Initialize backend with language preference."""
        self.language = language

    @abstractmethod
    def transcribe(self, audio_data: bytes) -> str:
        """Transcribe a WAV byte stream.

        Args:
            audio_data: 16-bit PCM WAV file contents

        Returns:
            Transcribed text, stripped of surrounding whitespace
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """True when the provider can accept requests."""
        pass

    @property
    def state(self) -> ModelState:
        return ModelState.LOADED if self.is_available() else ModelState.UNLOADED


class AbstractCleanupBackend(ABC):
    """Abstract base class for text cleanup providers."""

    @abstractmethod
    def cleanup(self, text: str, mode: str = "basic", custom_prompt: Optional[str] = None) -> str:
        """Rewrite transcribed text according to a cleanup mode."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @property
    def state(self) -> ModelState:
        return ModelState.LOADED if self.is_available() else ModelState.UNLOADED
