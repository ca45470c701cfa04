"""Handlers for the archive formats the updater can install."""

import bz2
import io
import tarfile
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from loguru import logger

from .exceptions import ExtractionError

_DRAIN_SIZE = 64 * 1024


class TarBz2PackageHandler:
    """
    Expands bzip2-compressed tar archives.

    The archive is read strictly sequentially, so the source may be a
    non-seekable stream. Entries are passed through tarfile's ``data``
    extraction filter: leading slashes are stripped, anything whose
    normalised path lands outside the destination is refused, as are hard
    and symbolic links that point outside it or at an absolute path, and
    setuid/setgid/sticky and group/other write bits are cleared.
    """

    extraction_filter = "data"

    def extract(self, source: BinaryIO, dest_dir: Path) -> int:
        """
        Extract a tar.bz2 stream into ``dest_dir``.

        Existing files are overwritten and existing directories merged.

        Args:
            source: Binary file object positioned at the start of the archive.
            dest_dir: Directory to expand into (created if missing).

        Returns:
            int: Number of archive entries written.

        Raises:
            ExtractionError: On bad compressed data, a corrupt or truncated
                archive, an entry escaping ``dest_dir`` or a filesystem error.
        """
        dest_dir = Path(dest_dir)
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(
                f"Cannot create destination directory {dest_dir}", original_error=e
            ) from e

        current: Optional[str] = None
        count = 0

        def tracked(archive: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
            nonlocal current, count
            for member in archive:
                current = member.name
                count += 1
                yield member

        try:
            with bz2.BZ2File(source, "rb") as decompressed:
                with tarfile.open(fileobj=decompressed, mode="r|") as archive:
                    archive.extractall(
                        dest_dir, members=tracked(archive), filter=self.extraction_filter
                    )
                current = None
                # Anything after the end-of-archive marker still has to be valid
                # bzip2, otherwise a truncated download would go unnoticed.
                while decompressed.read(_DRAIN_SIZE):
                    pass
        except tarfile.FilterError as e:
            raise ExtractionError(
                f"Refusing to extract entry outside {dest_dir}",
                member=current,
                original_error=e,
            ) from e
        except tarfile.TarError as e:
            raise ExtractionError(
                "Corrupt tar archive", member=current, original_error=e
            ) from e
        except EOFError as e:
            raise ExtractionError(
                "Compressed stream ended unexpectedly", member=current, original_error=e
            ) from e
        except OSError as e:
            raise ExtractionError(
                "Failed to extract archive", member=current, original_error=e
            ) from e

        logger.debug(f"Extracted {count} entries into {dest_dir}")
        return count

    def extract_buffer(self, data: bytes, dest_dir: Path) -> int:
        """Extract an archive held entirely in memory."""
        return self.extract(io.BytesIO(data), dest_dir)
