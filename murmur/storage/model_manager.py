"""Model weights storage: on-disk paths, presence checks and streamed downloads."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Union

import aiohttp

from ..errors import (
    DownloadHttpError,
    DownloadStartFailure,
    DownloadStreamError,
    MurmurIOError,
)
from ..models.assets import DEFAULT_ASSETS, DownloadProgress, ModelAsset

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[DownloadProgress], None]


class ModelAssetManager:
    """Resolves, checks and downloads model weight files."""

    def __init__(
        self,
        models_dir: str,
        assets: Iterable[ModelAsset] = DEFAULT_ASSETS,
        chunk_size: int = 64 * 1024,
        connect_timeout: float = 30.0,
    ):
        """Initialize model asset manager.

        Args:
            models_dir: Directory that holds every model file
            assets: Known downloadable models
            chunk_size: Maximum bytes read from the response per chunk
            connect_timeout: Seconds allowed to establish the connection
        """
        self.models_dir = Path(models_dir)
        self.assets: Dict[str, ModelAsset] = {asset.key: asset for asset in assets}
        self.chunk_size = chunk_size
        self.connect_timeout = connect_timeout

        logger.info(f"ModelAssetManager initialized with models_dir: {self.models_dir}")

    def get_asset(self, asset: Union[str, ModelAsset]) -> ModelAsset:
        if isinstance(asset, ModelAsset):
            return asset
        try:
            return self.assets[asset]
        except KeyError:
            raise ValueError(
                f"Unknown model '{asset}'. Known models: {', '.join(sorted(self.assets))}") from None

    def get_model_path(self, asset: Union[str, ModelAsset]) -> Path:
        return self.models_dir / self.get_asset(asset).filename

    def _partial_path(self, asset: ModelAsset) -> Path:
        return self.models_dir / f"{asset.filename}.part"

    def is_downloaded(self, asset: Union[str, ModelAsset]) -> bool:
        """Pure existence check of the final model file."""
        return self.get_model_path(asset).exists()

    def status(self) -> Dict[str, bool]:
        """Download status of every known model, e.g. {'whisper_downloaded': True}."""
        return {f"{key}_downloaded": self.is_downloaded(key) for key in self.assets}

    async def download(
        self,
        asset: Union[str, ModelAsset],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """Stream a model file to disk.

        Bytes go to '<filename>.part' and are renamed onto the final path only
        after the whole body has been written and flushed. Any failure removes
        the partial file, so is_downloaded() never sees a truncated model.

        Args:
            asset: Model key ('whisper', 'llm') or ModelAsset
            on_progress: Called after every chunk; runs on the event loop and
                        must not block

        Returns:
            Path of the downloaded model file

        Raises:
            MurmurIOError: The models directory or file could not be written
            DownloadStartFailure: The request could not be sent
            DownloadHttpError: The server answered with a non-2xx status
            DownloadStreamError: The body stream broke off mid-transfer
        """
        asset = self.get_asset(asset)
        dest_path = self.get_model_path(asset)
        part_path = self._partial_path(asset)

        try:
            dest_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise MurmurIOError(f"Failed to create models directory: {e}") from e

        logger.info(f"Downloading {asset.display_name} from {asset.url}")
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.connect_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            try:
                response = await session.get(asset.url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"Failed to start download of {asset.display_name}: {e}")
                raise DownloadStartFailure(f"Failed to start download: {e}") from e

            async with response:
                if not 200 <= response.status < 300:
                    logger.error(f"Download of {asset.display_name} failed with status {response.status}")
                    raise DownloadHttpError(response.status, asset.url)

                total_size = response.content_length or 0
                try:
                    downloaded = await self._stream_to_file(
                        response, part_path, asset.display_name, total_size, on_progress)
                except BaseException:
                    part_path.unlink(missing_ok=True)
                    raise

        try:
            os.replace(part_path, dest_path)
        except OSError as e:
            part_path.unlink(missing_ok=True)
            raise MurmurIOError(f"Failed to move download into place: {e}") from e

        logger.info(f"Downloaded {asset.display_name}: {downloaded} bytes -> {dest_path}")
        return dest_path

    async def _stream_to_file(
        self,
        response: aiohttp.ClientResponse,
        part_path: Path,
        model_name: str,
        total_size: int,
        on_progress: Optional[ProgressCallback],
    ) -> int:
        downloaded = 0
        try:
            with open(part_path, 'wb') as f:
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    f.write(chunk)
                    downloaded += len(chunk)
                    if on_progress is not None:
                        on_progress(DownloadProgress.create(model_name, downloaded, total_size))
                f.flush()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Download error after {downloaded} bytes: {e}")
            raise DownloadStreamError(f"Download error: {e}") from e
        except OSError as e:
            logger.error(f"Failed to write to file {part_path}: {e}")
            raise MurmurIOError(f"Failed to write to file: {e}") from e
        return downloaded

    def download_sync(
        self,
        asset: Union[str, ModelAsset],
        on_progress: Optional[ProgressCallback] = None,
    ) -> Path:
        """Run download() to completion on a fresh event loop."""
        return asyncio.run(self.download(asset, on_progress))
