"""Parses the configured credential value into an ordered pool of tokens.

The pool is recomputed from its source on every lookup, so edits to the
environment or configuration file are picked up between attempts.
"""

import logging
from typing import Callable, Iterable, List, Optional

from acedeck.domain.models.common import Credential
from acedeck.infrastructure.config.settings import get_credential_string

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 10

# Characters users paste along with keys copied from consoles and chat apps.
_QUOTE_CHARS = "\"'`"
_INVISIBLE_CHARS = "\u200b\u200c\u200d\ufeff\xa0"
_STRIP_TABLE = str.maketrans("", "", _QUOTE_CHARS + _INVISIBLE_CHARS)


def parse_credentials(raw: Optional[str], min_length: int = DEFAULT_MIN_LENGTH) -> List[Credential]:
    """Splits a comma-separated value into clean, unique credentials.

    Entries are trimmed and stripped of quotes and invisible characters.
    Entries shorter than `min_length` are dropped. Duplicates collapse to
    the first occurrence.
    """
    if not raw:
        return []
    seen = set()
    credentials: List[Credential] = []
    for entry in raw.split(","):
        token = entry.translate(_STRIP_TABLE).strip()
        if len(token) < min_length:
            if token:
                logger.debug(f"Discarding credential entry shorter than {min_length} characters.")
            continue
        if token in seen:
            continue
        seen.add(token)
        credentials.append(Credential(token))
    return credentials


def mask_credential(credential: Optional[str]) -> str:
    """Returns a log-safe form of a credential ('abcd…wxyz')."""
    if not credential:
        return "<none>"
    if len(credential) <= 8:
        return "…" + credential[-2:]
    return f"{credential[:4]}…{credential[-4:]}"


class CredentialPool:
    """Live view of the credentials configured for one provider."""

    def __init__(
        self,
        source: Optional[Callable[[], Optional[str]]] = None,
        min_length: int = DEFAULT_MIN_LENGTH,
        provider: str = "gemini",
    ):
        """Initializes the pool.

        Args:
            source: Callable returning the raw comma-separated value. Defaults
                to the provider's configured API key value, read per call.
            min_length: Minimum accepted credential length.
            provider: Provider name used for the default source and logging.
        """
        self.provider = provider
        self.min_length = min_length
        self._source = source or (lambda: get_credential_string(provider))

    def all(self) -> List[Credential]:
        """Every configured credential, ignoring any blacklist."""
        return parse_credentials(self._source(), self.min_length)

    def active(self, blacklist: Iterable[str] = ()) -> List[Credential]:
        """Configured credentials minus the blacklisted ones, in order."""
        excluded = set(blacklist)
        return [c for c in self.all() if c not in excluded]
