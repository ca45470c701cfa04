"""Persistence of the last successful install."""

import json
import os
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from loguru import logger
from pydantic import ValidationError

from .exceptions import ConfigIOError
from .models import ConfigRecord


class StateStore:
    """
    Reads and writes the JSON state file.

    A missing file means first run. An unreadable or malformed file is
    logged and treated the same way, so the next successful install
    rewrites it.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    async def load(self) -> Optional[ConfigRecord]:
        """Return the stored record, or None when there is none to use."""
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            logger.debug(f"No state file at {self.path}, assuming first run")
            return None
        except OSError as e:
            error = ConfigIOError(
                f"Cannot read state file {self.path}", path=self.path, original_error=e
            )
            logger.warning(f"{error}; falling back to first-run defaults")
            return None

        try:
            return ConfigRecord.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError, ValueError, TypeError) as e:
            logger.warning(
                f"Ignoring malformed state file {self.path}: {e}"
            )
            return None

    async def save(self, record: ConfigRecord) -> None:
        """
        Write ``record`` atomically.

        The content goes to a sibling temporary file which then replaces the
        state file, so readers never see a half-written record.

        Raises:
            ConfigIOError: If the file could not be written.
        """
        payload = record.model_dump_json()
        tmp_path = self.path.with_name(f".{self.path.name}.{os.getpid()}.tmp")
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
                await f.flush()
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            try:
                await aiofiles.os.remove(tmp_path)
            except OSError:
                pass
            raise ConfigIOError(
                f"Cannot write state file {self.path}", path=self.path, original_error=e
            ) from e
        logger.debug(f"Saved state {payload} to {self.path}")
