"""Durable response cache backed by `diskcache`.

Stores the raw text of successful content requests under a fingerprint of
the logical request. Entries never expire. When a write would exceed the
configured storage quota the whole store is wiped and the write is retried
once; the cache never surfaces a storage failure to its caller.
"""

import errno
import logging
import re
import sqlite3
from pathlib import Path
from typing import Optional, Union

import diskcache

from acedeck.domain.interfaces.cache import ResponseStore
from acedeck.domain.models.common import CacheKey
from acedeck.domain.models.errors import StorageQuotaExceededError

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "acedeck"
DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024
DEFAULT_CACHE_DIR = Path.home() / ".acedeck" / "cache"

_WHITESPACE_RE = re.compile(r"\s+")


def _normalize(part: str) -> str:
    return _WHITESPACE_RE.sub("_", str(part).strip())


def _is_quota_error(error: BaseException) -> bool:
    if isinstance(error, StorageQuotaExceededError):
        return True
    if isinstance(error, OSError) and error.errno == errno.ENOSPC:
        return True
    return isinstance(error, sqlite3.OperationalError) and "full" in str(error).lower()


class ResponseCache(ResponseStore):
    """Fingerprint-keyed text cache with a wipe-all quota policy."""

    def __init__(
        self,
        directory: Union[str, Path] = DEFAULT_CACHE_DIR,
        namespace: str = DEFAULT_NAMESPACE,
        quota_bytes: int = DEFAULT_QUOTA_BYTES,
        store: Optional[diskcache.Cache] = None,
    ):
        """Initializes the cache.

        Args:
            directory: Directory of the on-disk store.
            namespace: Prefix of every fingerprint.
            quota_bytes: Upper bound on the store's on-disk volume.
            store: Pre-built store (mainly for tests); opened from `directory` if omitted.
        """
        self.namespace = namespace
        self.quota_bytes = quota_bytes
        self.directory = Path(directory)
        if store is None:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Size-based culling is replaced by the wipe-all quota policy below.
            store = diskcache.Cache(str(self.directory), eviction_policy="none")
        self._store = store
        logger.info(f"ResponseCache initialized. dir={self.directory}, namespace={namespace}, quota={quota_bytes} bytes")

    def fingerprint(self, kind: str, subject: str, chapter: str) -> CacheKey:
        """Builds '<namespace>_<kind>_<subject>_<chapter>' with whitespace runs as '_'."""
        parts = [self.namespace, getattr(kind, "value", kind), subject, chapter]
        return CacheKey("_".join(_normalize(p) for p in parts))

    def get(self, key: CacheKey) -> Optional[str]:
        try:
            value = self._store.get(key)
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Failed to read cache entry '{key}': {e}")
            return None
        if value is None:
            logger.debug(f"Cache miss for key: {key}")
            return None
        logger.debug(f"Cache hit for key: {key}")
        return value

    def _write(self, key: CacheKey, value: str) -> None:
        incoming = len(value.encode("utf-8"))
        if self._store.volume() + incoming > self.quota_bytes:
            raise StorageQuotaExceededError(
                f"Writing {incoming} bytes would exceed the cache quota of {self.quota_bytes} bytes."
            )
        self._store.set(key, value)

    def set(self, key: CacheKey, value: str) -> None:
        """Stores `value`; on quota exhaustion wipes the store and retries once."""
        try:
            self._write(key, value)
            logger.debug(f"Stored cache entry: key={key}")
            return
        except (StorageQuotaExceededError, OSError, sqlite3.Error) as e:
            if not _is_quota_error(e):
                logger.error(f"Failed to write cache entry '{key}': {e}")
                return
            logger.warning(f"Cache storage quota reached ({e}). Clearing the cache and retrying.")

        self.clear()
        try:
            self._write(key, value)
            logger.debug(f"Stored cache entry after clearing: key={key}")
        except (StorageQuotaExceededError, OSError, sqlite3.Error) as e:
            logger.error(f"Dropping cache entry '{key}' after clearing the cache: {e}")

    def clear(self) -> int:
        try:
            removed = self._store.clear()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Failed to clear cache at {self.directory}: {e}")
            return 0
        logger.info(f"Cleared {removed} cache entries at: {self.directory}")
        return removed

    def close(self) -> None:
        self._store.close()
