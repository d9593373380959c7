"""Concrete implementation of the FileSystem interface for the local disk.

Uses `pathlib` for paths and `aiofiles` for async I/O when exporting
notes, narration audio and formula images.
"""

import logging
from pathlib import Path

import aiofiles

from acedeck.domain.interfaces.file_system import FileSystem
from acedeck.domain.models.common import FilePath

logger = logging.getLogger(__name__)


class LocalFileSystem(FileSystem):
    """Implementation of FileSystem for the local disk."""

    def __init__(self):
        logger.info("LocalFileSystem initialized.")

    async def _write(self, file_path: FilePath, payload, mode: str) -> None:
        path = Path(file_path)
        logger.debug(f"Attempting to write {len(payload)} {'bytes' if 'b' in mode else 'characters'} to file: {path}")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            if "b" in mode:
                async with aiofiles.open(path, mode=mode) as f:
                    await f.write(payload)
            else:
                async with aiofiles.open(path, mode=mode, encoding="utf-8") as f:
                    await f.write(payload)
            logger.debug(f"Successfully wrote to {path}")
        except PermissionError as e:
            logger.error(f"Permission denied writing file: {path}")
            raise PermissionError(f"Permission denied: {file_path}") from e
        except OSError as e:
            logger.error(f"Error writing file {path}: {e}", exc_info=True)
            raise IOError(f"Failed to write file {file_path}: {e}") from e

    async def write_text(self, file_path: FilePath, content: str) -> None:
        """Writes text content asynchronously using aiofiles."""
        await self._write(file_path, content, "w")

    async def write_bytes(self, file_path: FilePath, data: bytes) -> None:
        """Writes binary content asynchronously using aiofiles."""
        await self._write(file_path, data, "wb")
