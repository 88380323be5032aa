"""Data models for the Murmur application."""

from .audio import AudioBuffer, AudioDevice, AudioStats, CaptureState
from .assets import DEFAULT_ASSETS, PHI3_MINI, WHISPER_BASE_EN, DownloadProgress, ModelAsset
from .transcription import CleanupMode, DictationResult, ModelState

__all__ = [
    "AudioBuffer",
    "AudioDevice",
    "AudioStats",
    "CaptureState",
    "DownloadProgress",
    "ModelAsset",
    "DEFAULT_ASSETS",
    "PHI3_MINI",
    "WHISPER_BASE_EN",
    "CleanupMode",
    "DictationResult",
    "ModelState",
]
