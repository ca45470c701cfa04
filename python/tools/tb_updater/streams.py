"""
Bridge between the async download loop and the synchronous extractor.

The download coroutine pushes body chunks into a :class:`ChunkStream`; the
extractor, running in a worker thread, reads it like any binary file. The
queue is bounded so a slow extractor throttles the download instead of
letting the archive pile up in memory.
"""

import io
import queue
import threading
from typing import Optional

_EOF = object()
_POLL_INTERVAL = 0.1


class StreamAborted(OSError):
    """Raised on the reading side when the writer gave up mid-stream."""


class ChunkStream(io.RawIOBase):
    """A read-only raw stream fed chunk by chunk from another thread."""

    def __init__(self, max_chunks: int = 64):
        super().__init__()
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=max_chunks)
        self._pending = memoryview(b"")
        self._eof = False
        self._reader_gone = threading.Event()

    # --- Writer side ---

    def feed(self, chunk: bytes) -> bool:
        """
        Queue a chunk for the reader, blocking while the queue is full.

        Returns:
            bool: False if the reader stopped consuming, True otherwise.
        """
        if not chunk:
            return not self._reader_gone.is_set()
        return self._put(bytes(chunk))

    def finish(self) -> bool:
        """Signal a clean end of stream."""
        return self._put(_EOF)

    def abort(self, error: BaseException) -> bool:
        """Make the reader fail with ``error`` as the cause."""
        return self._put(error)

    def _put(self, item: object) -> bool:
        while not self._reader_gone.is_set():
            try:
                self._queue.put(item, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    # --- Reader side ---

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._eof:
            return 0
        if not self._pending:
            item = self._queue.get()
            if item is _EOF:
                self._eof = True
                return 0
            if isinstance(item, BaseException):
                self._eof = True
                raise StreamAborted(f"download aborted: {item}") from item
            self._pending = memoryview(item)
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        """Release a writer blocked on a full queue."""
        self._reader_gone.set()
        super().close()

    @property
    def reader_gone(self) -> bool:
        return self._reader_gone.is_set()


def open_chunk_reader(stream: ChunkStream,
                      buffer_size: Optional[int] = None) -> io.BufferedReader:
    """Wrap a chunk stream in a buffered reader for decompressors."""
    return io.BufferedReader(stream, buffer_size or io.DEFAULT_BUFFER_SIZE)
