"""Interface for the response cache.

Defines the contract for storing and retrieving successful text responses
by request fingerprint. Entries never expire by time.
"""

import abc
from typing import Optional

from ..models.common import CacheKey


class ResponseStore(abc.ABC):
    """Abstract Base Class for caching operations."""

    @abc.abstractmethod
    def fingerprint(self, kind: str, subject: str, chapter: str) -> CacheKey:
        """Derives the deterministic, whitespace-normalized key of a request."""
        pass

    @abc.abstractmethod
    def get(self, key: CacheKey) -> Optional[str]:
        """Returns the cached text, or None on a miss."""
        pass

    @abc.abstractmethod
    def set(self, key: CacheKey, value: str) -> None:
        """Stores `value` under `key`. Never raises.

        On storage-quota exhaustion the whole store is cleared and the
        write is retried once.
        """
        pass

    @abc.abstractmethod
    def clear(self) -> int:
        """Removes every entry and returns how many were removed."""
        pass
