"""Streams release archives from the CDN into the extractor."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

import aiohttp
from loguru import logger
from tqdm.asyncio import tqdm

from .exceptions import ExtractionError, NetworkError
from .models import ProgressCallback, UpdateStatus
from .packaging import TarBz2PackageHandler
from .settings import UpdaterSettings
from .streams import ChunkStream, StreamAborted, open_chunk_reader
from .version import Version

BAR_FORMAT = "[{elapsed}] |{bar:40}| {n_fmt}/{total_fmt} ({remaining})"

# Receives each body chunk; returning False stops the transfer.
ChunkSink = Callable[[bytes], Awaitable[bool]]


def content_length(headers) -> Optional[int]:
    """Parse a Content-Length header, or None if it is missing or bogus."""
    value = headers.get("Content-Length")
    if value is None:
        return None
    value = value.strip()
    if not value.isascii() or not value.isdigit():
        return None
    return int(value)


class Downloader:
    """
    Fetches the Linux x86_64 tarball for a release.

    One HTTP session is shared with the rest of the run. The body is read in
    reception order and every chunk advances a tqdm bar on stderr; with an
    unknown Content-Length the bar degrades to a plain byte counter.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: UpdaterSettings,
        package_handler: Optional[TarBz2PackageHandler] = None,
        progress_callback: Optional[ProgressCallback] = None,
        show_progress: bool = True,
    ):
        self.session = session
        self.settings = settings
        self.package_handler = package_handler or TarBz2PackageHandler()
        self._progress_callback = progress_callback
        self.show_progress = show_progress

    def archive_url(self, version: Version) -> str:
        return self.settings.archive_url(version)

    async def _report_progress(self, received: int, total: Optional[int]) -> None:
        if self._progress_callback is None:
            return
        fraction = received / total if total else 0.0
        await self._progress_callback(
            UpdateStatus.DOWNLOADING,
            min(fraction, 1.0),
            f"Downloaded {received} of {total if total else '?'} bytes",
        )

    async def _transfer(self, url: str, sink: ChunkSink) -> bool:
        """
        GET ``url`` and hand every body chunk to ``sink``.

        Returns:
            bool: True if the whole body was delivered, False if the sink
                asked to stop.

        Raises:
            NetworkError: On transport failure or a non-success status.
        """
        received = 0
        try:
            async with self.session.get(url) as response:
                if response.status >= 400:
                    raise NetworkError(
                        f"Failed to download {url}: HTTP {response.status}",
                        url=url,
                        status=response.status,
                    )
                # A zero length says no more about the body than a missing one.
                total = content_length(response.headers) or None
                with tqdm(
                    total=total,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    file=sys.stderr,
                    bar_format=BAR_FORMAT if total else None,
                    disable=not self.show_progress,
                ) as pbar:
                    async for chunk in response.content.iter_chunked(
                        self.settings.chunk_size
                    ):
                        received += len(chunk)
                        pbar.update(len(chunk))
                        if not await sink(chunk):
                            logger.debug(f"Transfer of {url} stopped after {received} bytes")
                            return False
                        await self._report_progress(received, total)
        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Failed to download {url}: {e}", url=url, original_error=e
            ) from e
        except TimeoutError as e:
            raise NetworkError(
                f"Timed out downloading {url}", url=url, original_error=e
            ) from e

        tqdm.write("Download complete.", file=sys.stderr)
        logger.info(f"Downloaded {received} bytes from {url}")
        return True

    async def fetch(self, version: Version) -> bytes:
        """
        Download the archive for ``version`` into memory.

        Raises:
            NetworkError: On transport failure or a non-success status.
        """
        buffer = bytearray()

        async def collect(chunk: bytes) -> bool:
            buffer.extend(chunk)
            return True

        await self._transfer(self.archive_url(version), collect)
        return bytes(buffer)

    async def install(self, version: Version, dest_dir: Path) -> int:
        """
        Stream the archive for ``version`` straight into ``dest_dir``.

        Decompression and extraction run in a worker thread that reads the
        body as it arrives. If extraction fails the download stops early.

        Returns:
            int: Number of archive entries extracted.

        Raises:
            NetworkError: On transport failure or a non-success status.
            ExtractionError: If the archive could not be expanded.
        """
        url = self.archive_url(version)
        stream = ChunkStream(max_chunks=self.settings.queue_depth)

        def extract() -> int:
            with open_chunk_reader(stream) as reader:
                return self.package_handler.extract(reader, dest_dir)

        async def feed(chunk: bytes) -> bool:
            return await asyncio.to_thread(stream.feed, chunk)

        logger.debug(f"Streaming {url} into {dest_dir}")
        extraction = asyncio.create_task(asyncio.to_thread(extract))
        try:
            completed = await self._transfer(url, feed)
        except BaseException as e:
            await asyncio.to_thread(stream.abort, e)
            try:
                await extraction
            except ExtractionError as extract_error:
                # The transfer error is the one worth reporting.
                if not isinstance(extract_error.original_error, StreamAborted):
                    logger.debug(f"Extraction also failed: {extract_error}")
            raise
        if completed:
            await asyncio.to_thread(stream.finish)
        return await extraction
