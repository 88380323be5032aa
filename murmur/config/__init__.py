"""YAML configuration loader for Murmur."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from platformdirs import user_data_dir

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    "audio": {
        "device": "",
        "sample_format": "float32",
        "frames_per_buffer": 1024,
        "level_meter_slots": 32,
        "level_window": 1024,
        "poll_interval_ms": 10,
        "join_timeout_seconds": 5.0,
    },
    "whisper": {
        "language": "en",
        "n_threads": 4,
    },
    "llm": {
        "n_ctx": 2048,
        "max_new_tokens": 256,
    },
    "cleanup": {
        "enabled": True,
        "mode": "basic",
        "custom_prompt": "",
    },
    "storage": {
        "data_directory": None,
        "models_directory": None,
    },
    "download": {
        "chunk_size": 64 * 1024,
        "connect_timeout_seconds": 30,
    },
    "logging": {
        "level": "INFO",
        "file_path": None,
        "console_output": True,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class MurmurConfig:
    """Murmur configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, built-in defaults
                        are used and paths resolve under the user data directory.
        """
        self.config_file = Path(config_path) if config_path else None

        if self.config_file is not None and not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load YAML over the defaults and resolve paths."""
        config = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_file is None:
            logger.info("No configuration file given, using defaults")
            self._resolve_paths(config, Path.cwd())
            return config

        logger.info(f"Loading configuration from: {self.config_file}")
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        _deep_merge(config, loaded)
        self._resolve_paths(config, self.config_file.parent)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any], config_dir: Path) -> None:
        """Resolve relative paths against the config file location and fill defaults."""
        storage = config["storage"]

        data_dir = storage.get("data_directory")
        if not data_dir:
            data_dir = user_data_dir("murmur", appauthor=False)
        elif not os.path.isabs(data_dir):
            data_dir = str(config_dir / data_dir)
        storage["data_directory"] = str(data_dir)

        models_dir = storage.get("models_directory")
        if not models_dir:
            models_dir = str(Path(data_dir) / "models")
        elif not os.path.isabs(models_dir):
            models_dir = str(config_dir / models_dir)
        storage["models_directory"] = str(models_dir)

        log_path = config["logging"].get("file_path")
        if not log_path:
            log_path = str(Path(data_dir) / "logs" / "murmur.log")
        elif not os.path.isabs(log_path):
            log_path = str(config_dir / log_path)
        config["logging"]["file_path"] = str(log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'audio.device').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'cleanup.mode')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        return str(Path(self.get('storage.data_directory')).absolute())

    def get_models_directory(self) -> str:
        """Get the directory that holds model weight files."""
        return str(Path(self.get('storage.models_directory')).absolute())
