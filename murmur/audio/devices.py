"""Input device enumeration and resolution via PortAudio."""

import logging
from typing import Any, Dict, List, Optional

import pyaudio

from ..errors import DeviceNotFound, NoDefaultDevice
from ..models.audio import AudioDevice

logger = logging.getLogger(__name__)


def _to_device(info: Dict[str, Any], default_index: Optional[int]) -> AudioDevice:
    return AudioDevice(
        index=int(info["index"]),
        name=str(info["name"]),
        is_default=default_index is not None and int(info["index"]) == default_index,
        max_input_channels=int(info["maxInputChannels"]),
        default_sample_rate=int(info["defaultSampleRate"]),
    )


def _default_input_index(pa: pyaudio.PyAudio) -> Optional[int]:
    try:
        return int(pa.get_default_input_device_info()["index"])
    except (IOError, OSError):
        return None


def enumerate_input_devices(pa: pyaudio.PyAudio) -> List[AudioDevice]:
    """List devices that expose at least one input channel."""
    default_index = _default_input_index(pa)
    devices = []
    for i in range(pa.get_device_count()):
        info = pa.get_device_info_by_index(i)
        if int(info.get("maxInputChannels", 0)) > 0:
            devices.append(_to_device(info, default_index))
    return devices


def resolve_input_device(pa: pyaudio.PyAudio, device_name: Optional[str] = None) -> AudioDevice:
    """Find the named input device, or the default one when no name is given.

    Raises:
        DeviceNotFound: No input device carries the given name
        NoDefaultDevice: No name given and the host has no default input
    """
    if device_name:
        for device in enumerate_input_devices(pa):
            if device.name == device_name:
                return device
        raise DeviceNotFound(f"Device not found: {device_name}")

    try:
        info = pa.get_default_input_device_info()
    except (IOError, OSError) as e:
        raise NoDefaultDevice("No default input device found") from e
    return _to_device(info, int(info["index"]))


def list_input_devices() -> List[AudioDevice]:
    """Get list of available audio input devices."""
    pa = pyaudio.PyAudio()
    try:
        devices = enumerate_input_devices(pa)
    finally:
        pa.terminate()
    logger.debug(f"Found {len(devices)} input devices")
    return devices
