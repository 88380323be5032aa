"""Murmur - local dictation: capture, transcribe and clean up speech."""

__version__ = "0.1.0"
