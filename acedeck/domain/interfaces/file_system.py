import abc

from acedeck.domain.models.common import FilePath


class FileSystem(abc.ABC):
    """Interface for writing generated artifacts (notes, audio, images)."""

    @abc.abstractmethod
    async def write_text(self, path: FilePath, content: str) -> None:
        """Writes text content to a file, creating parent directories.

        Raises:
            PermissionError: If the user lacks permission to write the file.
            IOError: For any other write failure.
        """
        pass

    @abc.abstractmethod
    async def write_bytes(self, path: FilePath, data: bytes) -> None:
        """Writes binary content to a file, creating parent directories."""
        pass
