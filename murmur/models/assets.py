"""Model asset data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelAsset:
    """A downloadable model weights file."""
    key: str            # "whisper" or "llm"
    display_name: str
    filename: str
    url: str


@dataclass(frozen=True)
class DownloadProgress:
    """Snapshot emitted after every received chunk."""
    model_name: str
    downloaded: int
    total: int          # 0 when the server omits Content-Length
    percentage: float

    @classmethod
    def create(cls, model_name: str, downloaded: int, total: int) -> "DownloadProgress":
        percentage = (downloaded / total) * 100.0 if total > 0 else 0.0
        return cls(model_name=model_name, downloaded=downloaded, total=total, percentage=percentage)


WHISPER_BASE_EN = ModelAsset(
    key="whisper",
    display_name="Whisper Base (English)",
    filename="ggml-base.en.bin",
    url="https://huggingface.co/ggerganov/whisper.cpp/resolve/main/ggml-base.en.bin",
)

PHI3_MINI = ModelAsset(
    key="llm",
    display_name="Phi-3 Mini 4K",
    filename="phi-3-mini-4k-instruct.Q4_K_M.gguf",
    url="https://huggingface.co/microsoft/Phi-3-mini-4k-instruct-gguf/resolve/main/Phi-3-mini-4k-instruct-q4.gguf",
)

DEFAULT_ASSETS = (WHISPER_BASE_EN, PHI3_MINI)
