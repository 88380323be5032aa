"""Services layer for Murmur application logic."""

from .dictation_service import DictationService

__all__ = [
    "DictationService",
]
