"""Main application entry point for Murmur."""

import sys
import time
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.progress import BarColumn, DownloadColumn, Progress, TextColumn, TransferSpeedColumn
from rich.table import Table

from . import __version__
from .config import MurmurConfig
from .errors import MurmurError
from .models.assets import DownloadProgress
from .services.dictation_service import DictationService

logger = logging.getLogger(__name__)
console = Console()


class App:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = MurmurConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.service = DictationService(self.config)

    def show_devices(self) -> None:
        table = Table(title="Input devices")
        table.add_column("Index", justify="right")
        table.add_column("Name")
        table.add_column("Channels", justify="right")
        table.add_column("Rate", justify="right")
        table.add_column("Default")
        for device in self.service.list_devices():
            table.add_row(
                str(device.index),
                device.name,
                str(device.max_input_channels),
                str(device.default_sample_rate),
                "*" if device.is_default else "",
            )
        console.print(table)

    def show_status(self) -> None:
        status = self.service.model_manager.status()
        for key, downloaded in status.items():
            mark = "[green]yes[/green]" if downloaded else "[red]no[/red]"
            console.print(f"{key}: {mark}")
        console.print(f"models directory: {self.config.get_models_directory()}")

    def download(self, key: str) -> Path:
        with Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            console=console,
        ) as progress:
            task = progress.add_task(key, total=None)

            def on_progress(update: DownloadProgress) -> None:
                progress.update(
                    task,
                    description=update.model_name,
                    completed=update.downloaded,
                    total=update.total or None,
                )

            path = asyncio.run(self.service.download_model(key, on_progress))
        console.print(f"Saved to {path}")
        return path

    def transcribe_file(self, wav_path: str, cleanup: bool, mode: Optional[str]) -> str:
        self._load_models(need_llm=cleanup)
        audio = Path(wav_path).read_bytes()
        text = self.service.transcribe_audio(audio)
        if cleanup and text:
            text = self.service.cleanup_text(text, mode)
        return text

    def dictate(self, duration: float, device: Optional[str], cleanup: bool,
                mode: Optional[str]) -> str:
        self.config.set('cleanup.enabled', cleanup)
        self._load_models(need_llm=cleanup)

        started = self.service.start_recording(device)
        if not started["success"]:
            raise MurmurError(started["error"])

        console.print(f"Recording for {duration:.0f}s "
                      f"({started['sample_rate']}Hz, {started['channels']}ch)...")
        end_time = time.time() + duration
        with Progress(TextColumn("level"), BarColumn(), console=console, transient=True) as progress:
            task = progress.add_task("level", total=1.0)
            while time.time() < end_time and self.service.is_recording():
                progress.update(task, completed=self.service.get_audio_levels()[-1])
                time.sleep(0.1)

        finished = self.service.finish_dictation(mode)
        if not finished["success"]:
            raise MurmurError(finished["error"])
        return finished["result"].text

    def _load_models(self, need_llm: bool) -> None:
        loaded = self.service.load_models()
        if loaded.get("whisper") is not True:
            raise MurmurError("Whisper model not available. Run 'murmur download whisper' first.")
        if need_llm and loaded.get("llm") is not True:
            logger.warning("LLM not available, cleanup will be skipped")

    def cleanup(self) -> None:
        self.service.shutdown()


def setup_logging(config: MurmurConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("Murmur starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Murmur - local dictation with whisper.cpp and llama.cpp",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Murmur v{__version__}"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("devices", help="List audio input devices")
    commands.add_parser("status", help="Show which models are downloaded")

    download = commands.add_parser("download", help="Download a model")
    download.add_argument("model", choices=["whisper", "llm"])

    transcribe = commands.add_parser("transcribe", help="Transcribe a 16-bit PCM WAV file")
    transcribe.add_argument("file", type=str)
    transcribe.add_argument("--cleanup", action="store_true", help="Rewrite the transcript with the LLM")
    transcribe.add_argument("--mode", choices=["basic", "formal", "casual", "custom"])

    dictate = commands.add_parser("dictate", help="Record from the microphone and transcribe")
    dictate.add_argument("--duration", type=float, default=5.0,
                         help="Recording duration in seconds (default: 5)")
    dictate.add_argument("--device", type=str, help="Input device name (default: system default)")
    dictate.add_argument("--no-cleanup", action="store_true", help="Skip LLM cleanup")
    dictate.add_argument("--mode", choices=["basic", "formal", "casual", "custom"])

    return parser


def main(argv=None) -> None:
    """Main entry point for Murmur."""
    args = build_parser().parse_args(argv)

    app = None
    try:
        app = App(args.config, args.log_level)
        if args.command == "devices":
            app.show_devices()
        elif args.command == "status":
            app.show_status()
        elif args.command == "download":
            app.download(args.model)
        elif args.command == "transcribe":
            console.print(app.transcribe_file(args.file, args.cleanup, args.mode))
        elif args.command == "dictate":
            console.print(app.dictate(args.duration, args.device, not args.no_cleanup, args.mode))
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    except (MurmurError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        logger.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        if app is not None:
            app.cleanup()


if __name__ == "__main__":
    main()
