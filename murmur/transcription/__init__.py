"""Transcription and cleanup module for Murmur."""

from .base import AbstractTranscriptionBackend, AbstractCleanupBackend
from .whisper_backend import WhisperTranscriptionBackend, WHISPER_MODEL_FILENAME
from .llama_cleaning_engine import LlamaCleaningEngine, LLM_MODEL_FILENAME
from .prompts import build_cleanup_prompt, system_instruction

__all__ = [
    "AbstractTranscriptionBackend",
    "AbstractCleanupBackend",
    "WhisperTranscriptionBackend",
    "WHISPER_MODEL_FILENAME",
    "LlamaCleaningEngine",
    "LLM_MODEL_FILENAME",
    "build_cleanup_prompt",
    "system_instruction",
]
