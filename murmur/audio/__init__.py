"""Audio capture and processing module."""

from .capture import AudioCapture, format_from_name
from .devices import list_input_devices
from .encoder import decode_wav, encode_buffer, encode_wav, read_pcm16
from .levels import LevelMeter
from .processing import resample, to_mono

__all__ = [
    'AudioCapture',
    'format_from_name',
    'list_input_devices',
    'decode_wav',
    'encode_buffer',
    'encode_wav',
    'read_pcm16',
    'LevelMeter',
    'resample',
    'to_mono',
]
