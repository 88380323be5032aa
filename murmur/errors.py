"""Error taxonomy for the capture-to-text pipeline."""


class MurmurError(Exception):
    """Base class for every error raised by Murmur."""

    pass


class StateError(MurmurError):
    """Operation not valid in the current state."""

    pass


class AlreadyRecording(StateError):
    pass


class NotRecording(StateError):
    pass


class NotLoaded(StateError):
    """Inference requested before the model was loaded."""

    pass


class JoinFailure(StateError):
    """The capture worker did not exit; the sample buffer may be inconsistent."""

    pass


class DeviceError(MurmurError):
    """Audio device could not be resolved or used."""

    pass


class DeviceNotFound(DeviceError):
    pass


class NoDefaultDevice(DeviceError):
    pass


class UnsupportedFormat(DeviceError):
    pass


class StreamFailure(DeviceError):
    """The hardware stream failed inside the capture worker."""

    pass


class MurmurIOError(MurmurError):
    """File or network read/write failure."""

    pass


class FormatError(MurmurError):
    """Malformed or unsupported WAV container."""

    pass


class ModelError(MurmurError):
    pass


class ModelNotFound(ModelError):
    pass


class LoadFailure(ModelError):
    pass


class TokenizationFailure(ModelError):
    pass


class DecodeFailure(ModelError):
    pass


class TransportError(MurmurError):
    """Model download failed on the wire."""

    pass


class DownloadStartFailure(TransportError):
    pass


class DownloadHttpError(TransportError):
    def __init__(self, status: int, url: str):
        super().__init__(f"Download failed with status: {status} ({url})")
        self.status = status
        self.url = url


class DownloadStreamError(TransportError):
    pass
