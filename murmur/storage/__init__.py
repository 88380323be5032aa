"""Storage of model weight files."""

from .model_manager import ModelAssetManager

__all__ = ["ModelAssetManager"]
