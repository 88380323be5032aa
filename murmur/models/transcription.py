"""Transcription-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ModelState(Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"


class CleanupMode(Enum):
    """Rewrite style for the cleanup engine."""
    BASIC = "basic"
    FORMAL = "formal"
    CASUAL = "casual"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Optional[str]) -> "CleanupMode":
        """Map a settings string to a mode; unknown values fall back to BASIC."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.BASIC


@dataclass
class DictationResult:
    """Result of one record -> transcribe -> cleanup run."""
    raw_text: str
    text: str
    cleaned: bool
    audio_duration_seconds: float
    transcription_time: float
    cleanup_time: float = 0.0
    cleanup_mode: Optional[str] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()
